# placemap/models/notification.py
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any, Optional


class NotificationType(Enum):
    """알림 유형을 정의하는 Enum 클래스"""
    LIKE = "like"
    COMMENT = "comment"
    RATING = "rating"
    MENTION = "mention"
    POST_UPDATE = "post_update"
    SYSTEM_ALERT = "system_alert"


class PushEvent(Enum):
    """푸시 채널로 전달되는 이벤트 이름"""
    NEW_NOTIFICATION = "newNotification"
    NOTIFICATION_READ = "notificationRead"


@dataclass
class Notification:
    """
    Firestore 'notifications' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    read 는 False -> True 로만 바뀝니다.
    """
    notification_id: str
    recipient_id: str      # 알림을 받는 사용자 ID
    sender: Dict[str, Any] # 알림을 유발한 사용자/시스템 정보
    type: NotificationType
    message: str
    related_post: Optional[str] = None
    read: bool = False
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
