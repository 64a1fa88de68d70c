# placemap/api/users/schemas.py
from marshmallow import Schema, fields


class UserResponseSchema(Schema):
    """
    GET /api/v1/users/me
    푸시 토큰 같은 기기 정보는 응답에서 제외합니다.
    """
    user_id = fields.Str(required=True, dump_only=True)
    email = fields.Str()
    name = fields.Str(required=True)
    avatar_url = fields.Str(allow_none=True)
    join_date = fields.DateTime()


class PushTokenSchema(Schema):
    """
    POST /api/v1/users/me/push-token
    푸시 채널(FCM) 주소 등록/갱신 요청 본문의 유효성을 검사하는 스키마.
    """
    token = fields.Str(required=True, error_messages={"required": "token은 필수 항목입니다."})
