# placemap/client/normalize.py
"""
원격 응답(게시글/알림)을 클라이언트 모델로 변환하는 수집 계층

- 위치는 {latitude, longitude} 또는 GeoJSON {coordinates: [lng, lat]} 두 형식을 받아
  (lat, lng) 하나로 통일합니다.
- id 가 없거나 좌표가 유한한 숫자 쌍이 아닌 게시글은 여기서 조용히 버립니다.
"""
import logging
import math
from numbers import Real
from typing import Any, Dict, Iterable, List, Optional, Tuple

from marshmallow import Schema, fields, pre_load, post_load, validate, EXCLUDE, ValidationError

from placemap.client.models import Post, PostedBy, UserRef, FeedNotification, SavedLocation
from placemap.models.post import PostCategory
from placemap.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)

# camelCase 로 내려오는 필드를 서버 스키마의 snake_case 로 맞춥니다.
POST_ALIASES = {
    'id': 'post_id', '_id': 'post_id',
    'averageRating': 'average_rating', 'totalRatings': 'total_ratings',
    'likesCount': 'likes_count', 'postedBy': 'posted_by', 'datePosted': 'date_posted',
}
UNTITLED = 'Untitled'
NOTIFICATION_ALIASES = {'id': 'notification_id', '_id': 'notification_id', 'relatedPost': 'related_post'}


def _finite_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ''


def _as_number(value: Any) -> float:
    return float(value) if _finite_number(value) else 0.0


def _as_list(value: Any) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


def _as_images(value: Any) -> List[Dict[str, Any]]:
    """이미지는 {url, image_id} 객체 또는 URL 문자열로 올 수 있습니다."""
    images = []
    for image in _as_list(value):
        if isinstance(image, str) and image:
            images.append({'url': image})
        elif isinstance(image, dict) and image.get('url'):
            images.append(image)
    return images


def normalize_position(location: Any) -> Optional[Tuple[float, float]]:
    """
    위치 표현을 (lat, lng) 로 변환합니다. 유효하지 않으면 None.
    GeoJSON coordinates([lng, lat])가 있으면 latitude/longitude 보다 먼저 봅니다.
    """
    if not isinstance(location, dict):
        return None
    coordinates = location.get('coordinates')
    if coordinates is not None:
        if not isinstance(coordinates, (list, tuple)) or len(coordinates) != 2:
            return None
        lng, lat = coordinates
    elif 'latitude' in location and 'longitude' in location:
        lat, lng = location['latitude'], location['longitude']
    else:
        return None
    if not (_finite_number(lat) and _finite_number(lng)):
        return None
    return float(lat), float(lng)


def resolve_posted_by(value: Any) -> Optional[PostedBy]:
    if isinstance(value, dict):
        user_id = value.get('user_id') or value.get('_id') or value.get('id')
        name = value.get('name') or value.get('username')
        if user_id:
            return PostedBy(PostedBy.USER_REF, UserRef(str(user_id), name, value.get('avatar_url')))
        if name:
            return PostedBy(PostedBy.NAME_ONLY, name)
        return None
    if isinstance(value, str) and value:
        return PostedBy(PostedBy.NAME_ONLY, value)
    return None


def _rename(data: Dict[str, Any], aliases: Dict[str, str]) -> Dict[str, Any]:
    renamed = dict(data)
    for alias, key in aliases.items():
        if alias in renamed and key not in renamed:
            renamed[key] = renamed.pop(alias)
    return renamed


class RemotePostSchema(Schema):
    """
    GET /posts 응답 항목 하나를 Post 로 변환합니다.
    게시글을 버리는 기준은 id 와 좌표뿐입니다. 나머지 필드는 형식이 어긋나면 기본값을 씁니다.
    """
    class Meta:
        unknown = EXCLUDE

    post_id = fields.Str(required=True, validate=validate.Length(min=1))
    location = fields.Raw(required=True)
    title = fields.Raw(load_default=None, allow_none=True)
    description = fields.Raw(load_default=None, allow_none=True)
    category = fields.Raw(load_default=None, allow_none=True)
    images = fields.Raw(load_default=None, allow_none=True)
    average_rating = fields.Raw(load_default=None, allow_none=True)
    total_ratings = fields.Raw(load_default=None, allow_none=True)
    likes = fields.Raw(load_default=None, allow_none=True)
    likes_count = fields.Raw(load_default=None, allow_none=True)
    comments = fields.Raw(load_default=None, allow_none=True)
    posted_by = fields.Raw(load_default=None, allow_none=True)
    date_posted = fields.Raw(load_default=None, allow_none=True)
    price = fields.Raw(load_default=None, allow_none=True)
    tags = fields.Raw(load_default=None, allow_none=True)

    @pre_load
    def rename_aliases(self, data, **kwargs):
        if not isinstance(data, dict):
            raise ValidationError("게시글은 객체여야 합니다.")
        data = _rename(data, POST_ALIASES)
        if data.get('post_id') is not None:
            data['post_id'] = str(data['post_id'])
        return data

    @post_load
    def make_post(self, data, **kwargs) -> Post:
        position = normalize_position(data['location'])
        if position is None:
            raise ValidationError({"location": ["유효한 좌표가 아닙니다."]})
        # likes 는 사용자 id 문자열 또는 {user_id} 객체로 올 수 있습니다.
        likes = {str(like.get('user_id', like.get('_id'))) if isinstance(like, dict) else str(like)
                 for like in _as_list(data['likes'])}
        likes_count = data['likes_count']
        return Post(
            id=data['post_id'],
            title=_as_text(data['title']) or UNTITLED,
            position=position,
            description=_as_text(data['description']),
            category=_as_text(data['category']) or PostCategory.GENERAL.value,
            images=_as_images(data['images']),
            average_rating=_as_number(data['average_rating']),
            total_ratings=int(_as_number(data['total_ratings'])),
            likes=likes,
            likes_count=int(likes_count) if _finite_number(likes_count) else len(likes),
            comments=[c for c in _as_list(data['comments']) if isinstance(c, dict)],
            posted_by=resolve_posted_by(data['posted_by']),
            date_posted=DateTimeUtils.coerce(data['date_posted']),
            price=_as_number(data['price']),
            tags=[str(tag) for tag in _as_list(data['tags']) if tag is not None],
        )


class RemoteNotificationSchema(Schema):
    """알림 API 응답과 푸시 데이터(모든 값이 문자열)를 함께 처리합니다."""
    class Meta:
        unknown = EXCLUDE

    notification_id = fields.Str(required=True, validate=validate.Length(min=1))
    message = fields.Str(load_default='')
    date = fields.Raw(load_default=None, allow_none=True)
    read = fields.Bool(load_default=False)
    related_post = fields.Str(load_default=None, allow_none=True)
    type = fields.Str(load_default=None, allow_none=True)
    sender = fields.Dict(load_default=None, allow_none=True)

    @pre_load
    def rename_aliases(self, data, **kwargs):
        if not isinstance(data, dict):
            raise ValidationError("알림은 객체여야 합니다.")
        return _rename(data, NOTIFICATION_ALIASES)

    @post_load
    def make_notification(self, data, **kwargs) -> FeedNotification:
        data['date'] = DateTimeUtils.coerce(data['date'])
        return FeedNotification(id=data.pop('notification_id'), **data)


class RemoteSavedLocationSchema(Schema):
    """/users/saved-locations 응답 항목. 좌표가 없는 장소도 목록에는 남깁니다."""
    class Meta:
        unknown = EXCLUDE

    location_id = fields.Str(required=True, validate=validate.Length(min=1))
    name = fields.Str(load_default=UNTITLED)
    latitude = fields.Raw(load_default=None, allow_none=True)
    longitude = fields.Raw(load_default=None, allow_none=True)
    address = fields.Str(load_default=None, allow_none=True)
    place_id = fields.Str(load_default=None, allow_none=True)
    category = fields.Str(load_default=PostCategory.GENERAL.value)
    description = fields.Str(load_default=None, allow_none=True)
    saved_at = fields.Raw(load_default=None, allow_none=True)

    @post_load
    def make_saved_location(self, data, **kwargs) -> SavedLocation:
        return SavedLocation(
            id=data['location_id'],
            name=data['name'],
            position=normalize_position({'latitude': data['latitude'], 'longitude': data['longitude']}),
            address=data['address'],
            place_id=data['place_id'],
            category=data['category'],
            description=data['description'],
            saved_at=DateTimeUtils.coerce(data['saved_at']),
        )


_post_schema = RemotePostSchema()
_notification_schema = RemoteNotificationSchema()
_saved_location_schema = RemoteSavedLocationSchema()


def normalize_post(raw: Any) -> Optional[Post]:
    try:
        return _post_schema.load(raw)
    except ValidationError as err:
        logger.debug(f"렌더링할 수 없는 게시글 제외: {err.messages}")
        return None


def normalize_posts(raw_posts: Iterable[Any]) -> List[Post]:
    """원격 게시글 목록 중 렌더링 가능한 것만 남겨 변환합니다."""
    posts = []
    for raw in raw_posts or []:
        post = normalize_post(raw)
        if post is not None:
            posts.append(post)
    return posts


def normalize_notification(raw: Any) -> Optional[FeedNotification]:
    try:
        return _notification_schema.load(raw)
    except ValidationError as err:
        logger.warning(f"알림 데이터 변환 실패: {err.messages}")
        return None


def normalize_saved_locations(raw_locations: Iterable[Any]) -> List[SavedLocation]:
    locations = []
    for raw in raw_locations or []:
        try:
            locations.append(_saved_location_schema.load(raw))
        except ValidationError as err:
            logger.warning(f"저장 장소 데이터 변환 실패: {err.messages}")
    return locations
