from datetime import timezone

from marshmallow import Schema, fields, validate


class AppointmentCreateSchema(Schema):
    # Naive timestamps are taken as UTC
    scheduled_time = fields.AwareDateTime(required=True, data_key="scheduledTime", default_timezone=timezone.utc)
    location = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    notes = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=2000))
