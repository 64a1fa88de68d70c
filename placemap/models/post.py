# placemap/models/post.py
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Dict, Any


class PostCategory(Enum):
    """게시글 카테고리 (고정 열거형)"""
    GENERAL = "general"
    NATURE = "nature"
    CULTURE = "culture"
    SHOPPING = "shopping"
    FOOD = "food"
    EVENT = "event"
    TRAVEL = "travel"
    ENTERTAINMENT = "entertainment"
    LODGING = "lodging"
    LANDMARK = "landmark"
    OTHER = "other"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Author:
    """Post 문서 내부에 저장될 작성자 정보."""
    user_id: str
    name: str
    avatar_url: Optional[str] = None


@dataclass
class GeoPoint:
    """
    GeoJSON Point 형식의 위치 정보.
    coordinates 는 [경도(lng), 위도(lat)] 순서이며, 조회 편의를 위해 latitude/longitude 도 함께 저장합니다.
    """
    latitude: float
    longitude: float
    type: str = "Point"
    coordinates: List[float] = field(default_factory=list)

    def __post_init__(self):
        if not self.coordinates:
            self.coordinates = [self.longitude, self.latitude]


@dataclass
class PostImage:
    url: str
    image_id: str


@dataclass
class Post:
    """
    Firestore 'posts' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    - average_rating / total_ratings 는 서버(평점 서비스)만 갱신합니다.
    - like_user_ids 의 길이와 likes_count 는 항상 일치해야 합니다.
    """
    post_id: str
    title: str
    description: str
    category: str
    location: GeoPoint
    posted_by: Author
    images: List[PostImage] = field(default_factory=list)
    price: float = 0.0
    tags: List[str] = field(default_factory=list)
    average_rating: float = 0.0
    total_ratings: int = 0
    like_user_ids: List[str] = field(default_factory=list)
    likes_count: int = 0
    comment_count: int = 0
    date_posted: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)


@dataclass
class Rating:
    """Firestore 'ratings' 컬렉션 문서. 문서 ID 는 f"{user_id}_{post_id}" 입니다."""
    user_id: str
    post_id: str
    value: int
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
