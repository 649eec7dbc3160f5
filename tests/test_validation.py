"""
Tests for schema validation and the composable rules.
"""
from decimal import Decimal

import pytest
from marshmallow import ValidationError

from models.schemas.common import (
    FULLNAME_RULE,
    PASSWORD_RULE,
    Satisfies,
    has_digit,
    has_uppercase,
    min_words,
)
from models.schemas.itinerary import DetailsSchema, ItinerarySchema, MediaSchema, OptionalSchema
from models.schemas.user import UserCreateSchema, UserLoginSchema
from models.user import Role
from utils.validation import validate

VALID_USER = {
    "fullname": "Ann Lee",
    "email": "a@b.com",
    "password": "Abcdef1",
    "role": "user",
    "phone": "123",
}

ITINERARY_ID = "7d0b0f4e-8d4a-4a57-9a53-0f4c1b7c1f11"


class TestPredicates:
    """Small predicates compose into rules."""

    def test_satisfies_requires_every_predicate(self):
        rule = Satisfies(has_digit, has_uppercase, error="nope")
        assert rule("Abc1") == "Abc1"
        with pytest.raises(ValidationError) as exc:
            rule("abc1")
        assert exc.value.messages == ["nope"]

    def test_min_words_trims_first(self):
        assert min_words(2)("  Ann   Lee ")
        assert not min_words(2)("  Ann   ")


class TestUserSchema:

    def test_valid_payload_is_normalized(self):
        result = validate(UserCreateSchema(), dict(VALID_USER, email="  A@B.com "))
        assert result.ok
        assert result.value["email"] == "a@b.com"
        assert result.value["role"] is Role.USER

    def test_unknown_fields_are_stripped(self):
        result = validate(UserCreateSchema(), dict(VALID_USER, is_admin=True, id="x"))
        assert result.ok
        assert set(result.value) == {"fullname", "email", "password", "role", "phone"}

    def test_password_without_uppercase_names_the_rule(self):
        result = validate(UserCreateSchema(), dict(VALID_USER, password="alllowercase1"))
        assert not result.ok
        assert result.errors["password"] == [PASSWORD_RULE]

    def test_short_password_and_single_name(self):
        payload = {"fullname": "Ann", "email": "a@b.com", "password": "abc", "role": "user", "phone": "1"}
        result = validate(UserCreateSchema(), payload)
        assert not result.ok
        assert result.errors["fullname"] == [FULLNAME_RULE]
        assert "Password must be at least 6 characters long" in result.errors["password"]
        assert PASSWORD_RULE in result.errors["password"]

    def test_role_must_be_lowercase_enum(self):
        result = validate(UserCreateSchema(), dict(VALID_USER, role="ADMIN"))
        assert result.errors == {"role": ["Role must be either 'admin' or 'user'"]}

    def test_invalid_email(self):
        result = validate(UserCreateSchema(), dict(VALID_USER, email="not-an-email"))
        assert result.errors == {"email": ["Invalid email address"]}

    def test_missing_fields_are_reported_per_field(self):
        result = validate(UserCreateSchema(), {})
        assert set(result.errors) == {"fullname", "email", "password", "role", "phone"}

    def test_non_object_payload(self):
        result = validate(UserCreateSchema(), ["not", "an", "object"])
        assert not result.ok
        assert "_schema" in result.errors

    def test_login_requires_password(self):
        result = validate(UserLoginSchema(), {"email": "a@b.com", "password": ""})
        assert result.errors == {"password": ["Password is required"]}


class TestItinerarySchemas:

    def test_itinerary_cover_must_be_url(self):
        result = validate(ItinerarySchema(), {"name": "Lisbon", "cover": "nope"})
        assert result.errors == {"cover": ["Invalid URL"]}

    def test_itinerary_partial_update(self):
        result = validate(ItinerarySchema(), {"popular": True}, partial=True)
        assert result.ok
        assert result.value == {"popular": True}

    def test_details_maps_camel_case_and_strips_nested_unknowns(self):
        payload = {
            "description": "Old town walk",
            "notIncluded": "Lunch",
            "meetingPoint": "Main square",
            "costPerPerson": 19.99,
            "itinerary_id": ITINERARY_ID,
            "additional": {"security": "Low risk", "extra": "dropped"},
        }
        result = validate(DetailsSchema(), payload)
        assert result.ok
        assert result.value["not_included"] == "Lunch"
        assert result.value["meeting_point"] == "Main square"
        assert result.value["cost_per_person"] == Decimal("19.99")
        assert result.value["itinerary_id"] == ITINERARY_ID
        assert result.value["additional"] == {"security": "Low risk"}

    def test_details_rejects_non_positive_duration_and_bad_id(self):
        result = validate(DetailsSchema(), {"description": "Walk", "duration": 0, "itinerary_id": "123"})
        assert result.errors == {
            "duration": ["Duration must be a positive number"],
            "itinerary_id": ["Invalid itinerary ID"],
        }

    def test_optional_requires_detail_id(self):
        result = validate(OptionalSchema(), {"title": "Boat ride"})
        assert "detail_id" in result.errors

    def test_media_url(self):
        result = validate(MediaSchema(), {"url": "ftp//broken", "itinerary_id": ITINERARY_ID})
        assert result.errors == {"url": ["Invalid URL"]}

    @pytest.mark.parametrize("popular", ["yes", "true", 1, 0])
    def test_popular_must_be_a_json_boolean(self, popular):
        result = validate(ItinerarySchema(), {"name": "Lisbon", "popular": popular})
        assert result.errors == {"popular": ["Popular must be a boolean"]}
