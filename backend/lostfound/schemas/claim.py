from marshmallow import Schema, fields, validate, pre_load


class ClaimCreateSchema(Schema):
    item_id = fields.Int(required=True, data_key="itemId")
    message = fields.Str(required=True, validate=validate.Length(min=1, max=2000))

    @pre_load
    def strip(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get("message"), str):
            data = dict(data, message=data["message"].strip())
        return data


class ClaimStatusSchema(Schema):
    status = fields.Str(required=True, validate=validate.OneOf(("approved", "rejected", "pending")))
