# placemap/api/saved_locations/schemas.py
from marshmallow import Schema, fields, validate, pre_load

from placemap.api.posts.schemas import CATEGORIES


class SavedLocationCreateSchema(Schema):
    """
    POST /api/v1/users/saved-locations
    게시글에서 저장하는 경우 title 을 name 대신 보낼 수 있습니다.
    """
    location_id = fields.Str(required=True, validate=validate.Length(min=1),
                             error_messages={"required": "location_id는 필수 항목입니다."})
    name = fields.Str(required=True, validate=validate.Length(min=1, max=200),
                      error_messages={"required": "name은 필수 항목입니다."})
    latitude = fields.Float(load_default=None, allow_none=True, validate=validate.Range(min=-90, max=90))
    longitude = fields.Float(load_default=None, allow_none=True, validate=validate.Range(min=-180, max=180))
    address = fields.Str(load_default=None, allow_none=True)
    place_id = fields.Str(load_default=None, allow_none=True)
    category = fields.Str(load_default='general', validate=validate.OneOf(CATEGORIES))
    description = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=500))

    @pre_load
    def fill_name_from_title(self, data, **kwargs):
        if isinstance(data, dict) and 'title' in data:
            data = dict(data)
            title = data.pop('title')
            data.setdefault('name', title)
        return data


class SavedLocationResponseSchema(SavedLocationCreateSchema):
    """GET / POST / DELETE 응답의 목록 항목"""
    saved_at = fields.DateTime(dump_only=True)
