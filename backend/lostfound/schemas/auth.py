from marshmallow import Schema, fields, validate, pre_load


class RegisterSchema(Schema):
    email = fields.Email(required=True)
    full_name = fields.Str(required=True, data_key="fullName", validate=validate.Length(min=1, max=200))
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=8))
    phone = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=40))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get("email"), str):
            data = dict(data, email=data["email"].strip().lower())
        return data


class LoginSchema(Schema):
    email = fields.Email(required=True)
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=1))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get("email"), str):
            data = dict(data, email=data["email"].strip().lower())
        return data


class OtpVerifySchema(Schema):
    pending_token = fields.Str(required=True, data_key="pendingToken")
    code = fields.Str(required=True)


class OtpResendSchema(Schema):
    pending_token = fields.Str(required=True, data_key="pendingToken")


class ProfileUpdateSchema(Schema):
    full_name = fields.Str(data_key="fullName", validate=validate.Length(min=1, max=200))
    phone = fields.Str(allow_none=True, validate=validate.Length(max=40))
    avatar_url = fields.Str(allow_none=True, data_key="avatarUrl", validate=validate.Length(max=512))
    two_factor_enabled = fields.Bool(data_key="twoFactorEnabled")


class ContactSchema(Schema):
    name = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    email = fields.Email(required=True)
    message = fields.Str(required=True, validate=validate.Length(min=1, max=5000))
