# placemap/api/posts/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError

from placemap.models.post import PostCategory

CATEGORIES = [c.value for c in PostCategory]
MAX_IMAGES = 10


# --- 재사용을 위한 중첩 스키마 ---
class AuthorSchema(Schema):
    """게시글/댓글 응답에 포함될 작성자 정보 스키마."""
    user_id = fields.Str(required=True)
    name = fields.Str(allow_none=True)
    avatar_url = fields.Str(allow_none=True)


class LocationSchema(Schema):
    """
    위치 정보 스키마.
    요청에서는 latitude/longitude 를 받고, 응답에는 GeoJSON 의 type/coordinates 를 함께 내려줍니다.
    """
    latitude = fields.Float(required=True, validate=validate.Range(min=-90, max=90))
    longitude = fields.Float(required=True, validate=validate.Range(min=-180, max=180))
    type = fields.Str(dump_only=True)
    coordinates = fields.List(fields.Float(), dump_only=True)


class ImageSchema(Schema):
    url = fields.URL(required=True)
    image_id = fields.Str(load_default=None)


# --- API 요청/응답 스키마 ---

class PostCreateSchema(Schema):
    """POST /api/v1/posts 요청 본문의 유효성을 검사합니다."""
    title = fields.Str(required=True, validate=validate.Length(min=3, max=100))
    description = fields.Str(required=True, validate=validate.Length(min=1, max=500))
    category = fields.Str(load_default=PostCategory.GENERAL.value, validate=validate.OneOf(CATEGORIES))
    location = fields.Nested(LocationSchema, required=True)
    images = fields.List(fields.Nested(ImageSchema), load_default=list,
                         validate=validate.Length(max=MAX_IMAGES))
    price = fields.Float(load_default=0.0, validate=validate.Range(min=0))
    tags = fields.List(fields.Str(validate=validate.Length(min=1, max=30)), load_default=list,
                       validate=validate.Length(max=20))


class PostUpdateSchema(Schema):
    """PATCH /api/v1/posts/{post_id} 요청 본문. 모든 필드는 선택 사항입니다."""
    title = fields.Str(validate=validate.Length(min=3, max=100))
    description = fields.Str(validate=validate.Length(min=1, max=500))
    category = fields.Str(validate=validate.OneOf(CATEGORIES))
    price = fields.Float(validate=validate.Range(min=0))
    tags = fields.List(fields.Str(validate=validate.Length(min=1, max=30)), validate=validate.Length(max=20))

    @validates_schema
    def validate_not_empty(self, data, **kwargs):
        if not data:
            raise ValidationError("수정할 필드가 하나 이상 필요합니다.")


class RatingCreateSchema(Schema):
    """POST /api/v1/posts/{post_id}/ratings"""
    rating = fields.Int(required=True, strict=True, validate=validate.Range(min=1, max=5))


class CommentCreateSchema(Schema):
    """POST /api/v1/posts/{post_id}/comments"""
    content = fields.Str(required=True, validate=validate.Length(min=1, max=1000, error="댓글은 1~1000자 사이여야 합니다."))


class CommentResponseSchema(Schema):
    comment_id = fields.Str(required=True)
    post_id = fields.Str(required=True)
    author = fields.Nested(AuthorSchema, required=True)
    content = fields.Str(required=True)
    timestamp = fields.DateTime(required=True)


class PostResponseSchema(Schema):
    """게시글 정보 응답을 위한 최종 JSON 형식을 정의합니다."""
    post_id = fields.Str(dump_only=True)
    title = fields.Str(required=True)
    description = fields.Str(required=True)
    category = fields.Str(required=True)
    location = fields.Nested(LocationSchema, required=True)
    images = fields.List(fields.Nested(ImageSchema), required=True)
    price = fields.Float()
    tags = fields.List(fields.Str())
    average_rating = fields.Float()
    total_ratings = fields.Int()
    likes = fields.List(fields.Str(), attribute='like_user_ids')
    likes_count = fields.Int()
    comment_count = fields.Int()
    posted_by = fields.Nested(AuthorSchema, required=True)
    date_posted = fields.DateTime(required=True)
    updated_at = fields.DateTime()
