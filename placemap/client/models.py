# placemap/client/models.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Set, Tuple, Union


@dataclass(frozen=True)
class UserRef:
    user_id: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class PostedBy:
    """
    작성자 표현의 tagged union. 수집 시점에 한 번만 결정합니다.
    - kind == 'user-ref': value 는 UserRef
    - kind == 'name-only': value 는 표시 이름 문자열
    """
    kind: str
    value: Union[UserRef, str]

    USER_REF = 'user-ref'
    NAME_ONLY = 'name-only'

    @property
    def display_name(self) -> str:
        if self.kind == self.USER_REF:
            return self.value.name or ''
        return self.value

    @property
    def user_id(self) -> Optional[str]:
        return self.value.user_id if self.kind == self.USER_REF else None


@dataclass
class Post:
    """세션 동안 PostStore 가 소유하는 게시글. position 은 (lat, lng) 입니다."""
    id: str
    title: str
    position: Tuple[float, float]
    description: str = ''
    category: str = 'general'
    images: List[Dict[str, Any]] = field(default_factory=list)
    average_rating: float = 0.0
    total_ratings: int = 0
    likes: Set[str] = field(default_factory=set)
    likes_count: int = 0
    comments: List[Dict[str, Any]] = field(default_factory=list)
    posted_by: Optional[PostedBy] = None
    date_posted: Optional[datetime] = None
    price: float = 0.0
    tags: List[str] = field(default_factory=list)
    bookmarked: bool = False  # 세션에서 파생되는 값, 서버로 보내지 않음

    @property
    def poster_name(self) -> str:
        return self.posted_by.display_name if self.posted_by else ''


@dataclass
class FeedNotification:
    """알림 피드 항목. read 는 False -> True 로만 바뀝니다."""
    id: str
    message: str
    date: Optional[datetime] = None
    read: bool = False
    related_post: Optional[str] = None
    type: Optional[str] = None
    sender: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class SavedLocation:
    """저장한 장소. position 은 좌표가 없는 장소면 None 입니다."""
    id: str
    name: str
    position: Optional[Tuple[float, float]] = None
    address: Optional[str] = None
    place_id: Optional[str] = None
    category: str = 'general'
    description: Optional[str] = None
    saved_at: Optional[datetime] = None


@dataclass(frozen=True)
class GeocodeResult:
    """지오코딩 검색 결과 한 건. position 은 (lat, lng) 입니다."""
    name: str
    position: Tuple[float, float]
    address: Dict[str, Any] = field(default_factory=dict)
    type: Optional[str] = None
    category: Optional[str] = None
    bbox: Optional[List[float]] = None
    relevance: float = 0.0
