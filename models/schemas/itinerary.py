from marshmallow import EXCLUDE, Schema, fields, validate

from models.schemas.common import StrictBoolean, UUIDString, positive_number


class ItinerarySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True, validate=validate.Length(min=3, error="Name must be at least 3 characters long"))
    cover = fields.URL(error_messages={"invalid": "Invalid URL"})
    popular = StrictBoolean(error_messages={"invalid": "Popular must be a boolean"})


class AdditionalSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    security = fields.String()
    accessibility = fields.String()
    recommendations = fields.String()


class DetailsSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    description = fields.String(
        required=True, validate=validate.Length(min=3, error="Description must be at least 3 characters long")
    )
    tour = fields.String()
    alert = fields.String()
    duration = fields.Float(validate=positive_number)
    included = fields.String()
    not_included = fields.String(data_key="notIncluded")
    meeting_point = fields.String(data_key="meetingPoint")
    # Canonical type is numeric; numeric strings are accepted too
    cost_per_person = fields.Decimal(places=2, allow_nan=False, data_key="costPerPerson")
    itinerary_id = UUIDString(required=True, error_messages={"invalid_uuid": "Invalid itinerary ID"})
    additional = fields.Nested(AdditionalSchema)


class OptionalSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.String(required=True, validate=validate.Length(min=3, error="Title must be at least 3 characters long"))
    price = fields.Decimal(places=2, allow_nan=False)
    duration = fields.Float(validate=positive_number)
    description = fields.String()
    observations = fields.String()
    detail_id = UUIDString(required=True, error_messages={"invalid_uuid": "Invalid detail ID"})


class MediaSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    url = fields.URL(required=True, error_messages={"invalid": "Invalid URL"})
    itinerary_id = UUIDString(required=True, error_messages={"invalid_uuid": "Invalid itinerary ID"})


class MediaOutSchema(Schema):
    id = fields.String()
    url = fields.String()
    itinerary_id = fields.String()


class OptionalOutSchema(Schema):
    id = fields.String()
    detail_id = fields.String()
    title = fields.String()
    price = fields.Decimal(as_string=True, allow_none=True)
    duration = fields.Float(allow_none=True)
    description = fields.String(allow_none=True)
    observations = fields.String(allow_none=True)


class DetailsOutSchema(Schema):
    id = fields.String()
    itinerary_id = fields.String()
    description = fields.String()
    tour = fields.String(allow_none=True)
    alert = fields.String(allow_none=True)
    duration = fields.Float(allow_none=True)
    included = fields.String(allow_none=True)
    not_included = fields.String(allow_none=True, data_key="notIncluded")
    meeting_point = fields.String(allow_none=True, data_key="meetingPoint")
    cost_per_person = fields.Decimal(as_string=True, allow_none=True, data_key="costPerPerson")
    additional = fields.Dict(allow_none=True)
    optional = fields.List(fields.Nested(OptionalOutSchema))


class ItinerarySummaryOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    cover = fields.String(allow_none=True)
    popular = fields.Boolean(allow_none=True)
    user_id = fields.String(allow_none=True)


class ItineraryOutSchema(ItinerarySummaryOutSchema):
    media = fields.List(fields.Nested(MediaOutSchema))
    details = fields.Nested(DetailsOutSchema, allow_none=True)
