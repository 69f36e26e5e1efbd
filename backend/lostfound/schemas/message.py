from marshmallow import Schema, fields


class MessageCreateSchema(Schema):
    content = fields.Str(required=True)
