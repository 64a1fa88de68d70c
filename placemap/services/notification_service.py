# placemap/services/notification_service.py
import logging
import uuid
from dataclasses import asdict
from typing import Optional, Dict, Any, List

from firebase_admin import firestore, messaging
from firebase_admin.exceptions import FirebaseError
from google.api_core.exceptions import GoogleAPICallError

from placemap.models.notification import Notification, NotificationType, PushEvent
from placemap.utils.datetime_utils import DateTimeUtils

READ_FILTERS = ('all', 'read', 'unread')
BATCH_SIZE = 400 # Firestore batch 는 최대 500 건


class NotificationService:
    """
    알림 관련 비즈니스 로직을 담당하는 공용 서비스 클래스.
    - 알림 문서 저장(Firestore)과 푸시 전송(FCM 데이터 메시지)을 함께 처리합니다.
    - 푸시는 best-effort 이며, 실패해도 알림 생성/읽음 처리는 성공으로 간주합니다.
    """
    def __init__(self, db=None, push_enabled: bool = True):
        self.db = db or firestore.client()
        self.notifications_ref = self.db.collection('notifications')
        self.users_ref = self.db.collection('users')
        self.push_enabled = push_enabled

    def create_notification(self, recipient_id: str, sender_id: str, n_type: NotificationType,
                            message: str, related_post: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        알림을 생성하여 Firestore 에 저장하고 수신자에게 newNotification 이벤트를 푸시합니다.
        - 자기 자신에게 보내는 알림은 생성하지 않습니다.
        """
        if not recipient_id or recipient_id == sender_id:
            return None

        try:
            sender_doc = self.users_ref.document(sender_id).get()
            if sender_doc.exists:
                sender_info = sender_doc.to_dict()
                sender_data = {
                    "user_id": sender_id,
                    "name": sender_info.get('name'),
                    "avatar_url": sender_info.get('avatar_url')
                }
            else:
                sender_data = {"user_id": sender_id, "name": None, "avatar_url": None}

            notification = Notification(
                notification_id=str(uuid.uuid4()),
                recipient_id=recipient_id,
                sender=sender_data,
                type=n_type,
                message=message,
                related_post=related_post
            )
            # Enum 멤버를 문자열 값으로 변환하여 저장
            notification_dict = asdict(notification)
            notification_dict['type'] = notification.type.value

            self.notifications_ref.document(notification.notification_id).set(
                DateTimeUtils.for_firestore(notification_dict)
            )
            logging.info(f"{n_type.value} 알림 생성 완료: {sender_id} -> {recipient_id}")
        except Exception as e:
            logging.error(f"알림 생성 중 오류 발생: {e}", exc_info=True)
            return None

        self._push(recipient_id, PushEvent.NEW_NOTIFICATION, notification_dict)
        return notification_dict

    def get_notifications(self, recipient_id: str, limit: int = 10, read: str = 'all') -> List[Dict[str, Any]]:
        """수신자의 알림을 최신순으로 조회합니다. read 는 all/read/unread 중 하나입니다."""
        if read not in READ_FILTERS:
            raise ValueError(f"read 필터는 {READ_FILTERS} 중 하나여야 합니다.")

        query = self.notifications_ref.where('recipient_id', '==', recipient_id)
        if read != 'all':
            query = query.where('read', '==', read == 'read')
        query = query.order_by('date', direction=firestore.Query.DESCENDING).limit(limit)
        return [DateTimeUtils.from_firestore(doc.to_dict()) for doc in query.stream()]

    def count_unread(self, recipient_id: str) -> int:
        """읽지 않은 알림 수를 집계합니다."""
        query = (self.notifications_ref
                 .where('recipient_id', '==', recipient_id)
                 .where('read', '==', False))
        count_result = query.count().get()
        return int(count_result[0][0].value)

    def mark_as_read(self, recipient_id: str, notification_id: str) -> Optional[Dict[str, Any]]:
        """
        알림 하나를 읽음 처리합니다.
        수신자가 아니거나 알림이 없으면 None 을 반환합니다.
        """
        doc_ref = self.notifications_ref.document(notification_id)
        doc = doc_ref.get()
        if not doc.exists:
            return None
        data = doc.to_dict()
        if data.get('recipient_id') != recipient_id:
            return None

        if not data.get('read'):
            doc_ref.update({'read': True})
            data['read'] = True
            self._push(recipient_id, PushEvent.NOTIFICATION_READ, data)
        return DateTimeUtils.from_firestore(data)

    def mark_all_as_read(self, recipient_id: str) -> int:
        """수신자의 읽지 않은 알림을 모두 읽음 처리하고 변경된 개수를 반환합니다."""
        docs = list(self.notifications_ref
                    .where('recipient_id', '==', recipient_id)
                    .where('read', '==', False)
                    .stream())
        for i in range(0, len(docs), BATCH_SIZE):
            batch = self.db.batch()
            for doc in docs[i:i + BATCH_SIZE]:
                batch.update(doc.reference, {'read': True})
            batch.commit()

        if docs:
            self._push(recipient_id, PushEvent.NOTIFICATION_READ, {'notification_id': '*', 'read': True})
        logging.info(f"알림 일괄 읽음 처리 완료 (recipient: {recipient_id}, count: {len(docs)})")
        return len(docs)

    def delete_notification(self, recipient_id: str, notification_id: str) -> bool:
        doc_ref = self.notifications_ref.document(notification_id)
        doc = doc_ref.get()
        if not doc.exists or doc.to_dict().get('recipient_id') != recipient_id:
            return False
        doc_ref.delete()
        return True

    def _push(self, recipient_id: str, event: PushEvent, payload: Dict[str, Any]) -> bool:
        """
        수신자의 디바이스 토큰으로 FCM 데이터 메시지를 보냅니다.
        데이터 메시지의 값은 모두 문자열이어야 합니다.
        """
        if not self.push_enabled:
            return False
        try:
            user_doc = self.users_ref.document(recipient_id).get()
            token = user_doc.to_dict().get('push_token') if user_doc.exists else None
            if not token:
                return False

            data = {"event": event.value}
            for key, value in payload.items():
                if value is None or isinstance(value, dict):
                    continue
                if isinstance(value, bool):
                    data[key] = 'true' if value else 'false'
                elif hasattr(value, 'isoformat'):
                    data[key] = DateTimeUtils.to_iso_string(value)
                else:
                    data[key] = str(value)

            messaging.send(messaging.Message(data=data, token=token))
            return True
        except (FirebaseError, GoogleAPICallError, ValueError) as e:
            # 토큰 조회(Firestore) 실패도 푸시 실패로 처리합니다.
            logging.warning(f"푸시 전송 실패 (recipient: {recipient_id}, event: {event.value}): {e}")
            return False
