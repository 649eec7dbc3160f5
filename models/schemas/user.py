from marshmallow import EXCLUDE, Schema, fields, pre_load, validate

from models.schemas.common import normalize_email, password_policy, fullname_policy
from models.schemas.itinerary import ItinerarySummaryOutSchema
from models.user import Role


class UserCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    fullname = fields.String(required=True, validate=fullname_policy)
    email = fields.Email(required=True, error_messages={"invalid": "Invalid email address"})
    password = fields.String(required=True, load_only=True, validate=password_policy)
    role = fields.Enum(
        Role,
        by_value=True,
        required=True,
        error_messages={"unknown": "Role must be either 'admin' or 'user'"},
    )
    phone = fields.String(required=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data, email=normalize_email(data["email"]))
        return data


class UserLoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True, error_messages={"invalid": "Invalid email address"})
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1, error="Password is required"))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data, email=normalize_email(data["email"]))
        return data


class UserOutSchema(Schema):
    id = fields.String()
    fullname = fields.String()
    email = fields.String()
    role = fields.Enum(Role, by_value=True)
    phone = fields.String()


class UserWithItinerariesOutSchema(UserOutSchema):
    itineraries = fields.List(fields.Nested(ItinerarySummaryOutSchema))
