# placemap/api/notifications/schemas.py
from marshmallow import Schema, fields, validate

from placemap.services.notification_service import READ_FILTERS


class NotificationQuerySchema(Schema):
    """GET /api/v1/notifications 쿼리 파라미터"""
    limit = fields.Int(load_default=10, validate=validate.Range(min=1, max=100))
    read = fields.Str(load_default='all', validate=validate.OneOf(READ_FILTERS))


class SenderSchema(Schema):
    user_id = fields.Str(allow_none=True)
    name = fields.Str(allow_none=True)
    avatar_url = fields.Str(allow_none=True)


class NotificationResponseSchema(Schema):
    """알림 응답 형식. 클라이언트 피드는 이 형식을 그대로 받습니다."""
    notification_id = fields.Str(required=True)
    type = fields.Str(required=True)
    message = fields.Str(required=True)
    related_post = fields.Str(allow_none=True)
    sender = fields.Nested(SenderSchema, allow_none=True)
    read = fields.Bool(required=True)
    date = fields.DateTime(required=True)
