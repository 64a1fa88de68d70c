# placemap/client/notification_feed.py
import threading
from typing import Any, Dict, List

from placemap.client.api_client import ApiClient
from placemap.client.context import ClientContext
from placemap.client.errors import AuthRequired, ClientError
from placemap.client.models import FeedNotification
from placemap.client.mutation import Mutation
from placemap.client.normalize import normalize_notification
from placemap.client.scheduler import PeriodicTask
from placemap.models.notification import PushEvent

ALL_NOTIFICATIONS = '*'


class NotificationFeed:
    """
    최근 알림 몇 개(window)와 읽지 않은 알림 수를 보여주는 표시용 캐시.
    푸시 이벤트(newNotification, notificationRead)로 갱신하고, 주기적 조회로 보정합니다.
    전체 이력은 서버가 관리합니다.
    """
    def __init__(self, context: ClientContext, api: ApiClient):
        self.context = context
        self.api = api
        self.logger = context.logger.getChild('notifications')
        self.window = context.config.notification_window
        self.items: List[FeedNotification] = []
        self.unread_count = 0
        self._lock = threading.RLock()
        self._poll_task = PeriodicTask(context.config.notification_poll_interval, self.refresh,
                                       name='notification-poll')
        context.on_logout(self._teardown)

    # ---------------------------------------------------------------- 조회
    def refresh(self) -> bool:
        """읽지 않은 알림 수와 최근 알림을 다시 불러옵니다. 실패하면 로그만 남기고 기존 피드를 유지합니다."""
        if not self.context.is_authenticated:
            return False
        generation = self.context.generation
        try:
            count = self.api.get('/notifications/unread-count', auth=True)
            recent = self.api.get('/notifications', params={'limit': self.window}, auth=True)
        except ClientError as e:
            self.logger.error(f"알림 조회 실패: {e.message}")
            return False
        if not self.context.is_current(generation):
            return False

        items = [n for n in map(normalize_notification, (recent or {}).get('notifications', [])) if n]
        with self._lock:
            self.items = items[:self.window]
            self.unread_count = max(0, int((count or {}).get('count', 0)))
        return True

    def find(self, notification_id: str):
        return next((n for n in self.items if n.id == notification_id), None)

    # ---------------------------------------------------------------- 푸시 이벤트
    def dispatch(self, event: str, payload: Dict[str, Any]) -> bool:
        if event == PushEvent.NEW_NOTIFICATION.value:
            return self.handle_new(payload)
        if event == PushEvent.NOTIFICATION_READ.value:
            return self.handle_read(payload)
        self.logger.debug(f"알 수 없는 푸시 이벤트 무시: {event}")
        return False

    def handle_push(self, data: Dict[str, str]) -> bool:
        """FCM 데이터 메시지(event 키 포함, 값은 모두 문자열)를 처리합니다."""
        payload = dict(data)
        event = payload.pop('event', None)
        return self.dispatch(event, payload)

    def handle_new(self, payload: Dict[str, Any]) -> bool:
        notification = normalize_notification(payload)
        if notification is None:
            return False
        with self._lock:
            if self.find(notification.id) is not None:
                return False
            self.items.insert(0, notification)
            if not notification.read:
                self.unread_count += 1
            del self.items[self.window:]
        return True

    def handle_read(self, payload: Dict[str, Any]) -> bool:
        """다른 기기/서버에서 확인된 읽음 처리를 반영합니다."""
        notification_id = payload.get('notification_id') or payload.get('id')
        if notification_id == ALL_NOTIFICATIONS:
            self._flip_all()
            return True
        with self._lock:
            notification = self.find(notification_id)
            if notification is None or notification.read:
                return False
            notification.read = True
            self.unread_count = max(0, self.unread_count - 1)
        return True

    # ---------------------------------------------------------------- 읽음 처리
    def mark_read(self, notification_id: str) -> Mutation:
        """
        알림 하나를 낙관적으로 읽음 처리합니다.
        원격 요청이 실패해도 되돌리지 않고 mutation 을 failed 로 끝냅니다.
        """
        mutation = Mutation('mark_read', notification_id)
        if not self.context.is_authenticated:
            return mutation.roll_back(AuthRequired())

        with self._lock:
            notification = self.find(notification_id)
            if notification is None or not notification.read:
                self.unread_count = max(0, self.unread_count - 1)
            if notification is not None:
                notification.read = True

        try:
            self.api.patch(f'/notifications/{notification_id}/read', auth=True)
        except ClientError as e:
            self.logger.error(f"알림 읽음 처리 실패 (id: {notification_id}): {e.message}")
            return mutation.fail(e)
        return mutation.confirm()

    def mark_all_read(self) -> Mutation:
        mutation = Mutation('mark_all_read', ALL_NOTIFICATIONS)
        if not self.context.is_authenticated:
            return mutation.roll_back(AuthRequired())

        self._flip_all()
        try:
            self.api.patch('/notifications/read-all', auth=True)
        except ClientError as e:
            self.logger.error(f"알림 일괄 읽음 처리 실패: {e.message}")
            return mutation.fail(e)
        return mutation.confirm()

    def _flip_all(self) -> None:
        with self._lock:
            for notification in self.items:
                notification.read = True
            self.unread_count = 0

    # ---------------------------------------------------------------- 주기적 조회
    def start_polling(self) -> None:
        self._poll_task.start()

    def stop_polling(self) -> None:
        self._poll_task.stop()

    def _teardown(self) -> None:
        self.stop_polling()
        with self._lock:
            self.items = []
            self.unread_count = 0
