# placemap/models/user.py
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


# 'users' 컬렉션 문서(user_id, email, name, avatar_url, push_token)는 identity provider 연동 과정에서
# 생성되며, 이 서비스는 조회와 push_token 갱신만 합니다.

@dataclass
class Favorite:
    """Firestore 'favorites' 컬렉션 문서. 문서 ID 는 f"{user_id}_{post_id}" 입니다."""
    user_id: str
    post_id: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class SavedLocation:
    """
    Firestore 'saved_locations' 컬렉션 문서. 문서 ID 는 f"{user_id}_{location_id}" 입니다.
    location_id 는 클라이언트가 정한 값(게시글 id 또는 지오코딩 결과의 place_id 등)입니다.
    """
    user_id: str
    location_id: str
    name: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    place_id: Optional[str] = None
    category: str = 'general'
    description: Optional[str] = None
    saved_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
