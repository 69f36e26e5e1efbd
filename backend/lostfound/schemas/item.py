from marshmallow import EXCLUDE, Schema, fields, validate, pre_load

from ..models.types import ITEM_KINDS, ITEM_CATEGORIES, ITEM_STATUSES


def _strip_strings(data):
    if not isinstance(data, dict):
        return data
    return {k: (v.strip() if isinstance(v, str) else v) for k, v in data.items()}


class ItemCreateSchema(Schema):
    kind = fields.Str(required=True, validate=validate.OneOf(ITEM_KINDS))
    category = fields.Str(required=True, validate=validate.OneOf(ITEM_CATEGORIES))
    title = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    description = fields.Str(required=True, validate=validate.Length(min=1, max=5000))
    location = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    event_date = fields.Date(required=True, data_key="eventDate")
    image_ref = fields.Str(load_default=None, allow_none=True, data_key="imageRef", validate=validate.Length(max=512))
    contact_info = fields.Str(load_default=None, allow_none=True, data_key="contactInfo", validate=validate.Length(max=255))
    reward = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=120))

    @pre_load
    def strip(self, data, **kwargs):
        return _strip_strings(data)


class ItemUpdateSchema(Schema):
    category = fields.Str(validate=validate.OneOf(ITEM_CATEGORIES))
    title = fields.Str(validate=validate.Length(min=1, max=200))
    description = fields.Str(validate=validate.Length(min=1, max=5000))
    location = fields.Str(validate=validate.Length(min=1, max=200))
    event_date = fields.Date(data_key="eventDate")
    image_ref = fields.Str(allow_none=True, data_key="imageRef", validate=validate.Length(max=512))
    contact_info = fields.Str(allow_none=True, data_key="contactInfo", validate=validate.Length(max=255))
    reward = fields.Str(allow_none=True, validate=validate.Length(max=120))

    @pre_load
    def strip(self, data, **kwargs):
        return _strip_strings(data)


class ItemListArgsSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    kind = fields.Str(validate=validate.OneOf(ITEM_KINDS))
    category = fields.Str(validate=validate.OneOf(ITEM_CATEGORIES))
    status = fields.Str(validate=validate.OneOf(ITEM_STATUSES))
    owner_id = fields.Int(data_key="ownerId")
    q = fields.Str()
    limit = fields.Int(load_default=20)
