from typing import Callable

from marshmallow import ValidationError, fields, validate

PASSWORD_RULE = "Password must have at least one uppercase letter, one lowercase letter and one number"
FULLNAME_RULE = "Enter first and last name"


def has_lowercase(value: str) -> bool:
    return any(ch.islower() for ch in value)


def has_uppercase(value: str) -> bool:
    return any(ch.isupper() for ch in value)


def has_digit(value: str) -> bool:
    return any(ch.isdigit() for ch in value)


def min_words(count: int) -> Callable[[str], bool]:
    """Predicate: the trimmed value splits into at least ``count`` words."""
    def predicate(value: str) -> bool:
        return len(value.strip().split()) >= count
    return predicate


class Satisfies(validate.Validator):
    """Passes when every predicate holds; otherwise fails with one message.

    Combine with other validators through ``validate.And``.
    """

    default_message = "Invalid value."

    def __init__(self, *predicates: Callable[[str], bool], error: str | None = None):
        self.predicates = predicates
        self.error = error or self.default_message

    def _repr_args(self) -> str:
        return f"predicates={[getattr(p, '__name__', p) for p in self.predicates]!r}"

    def __call__(self, value):
        if not all(predicate(value) for predicate in self.predicates):
            raise ValidationError(self.error)
        return value


def normalize_email(value):
    return value.strip().lower() if isinstance(value, str) else value


password_policy = validate.And(
    validate.Length(min=6, error="Password must be at least 6 characters long"),
    Satisfies(has_lowercase, has_uppercase, has_digit, error=PASSWORD_RULE),
)

fullname_policy = validate.And(
    validate.Length(min=3, error="Name must be at least 3 characters long"),
    Satisfies(min_words(2), error=FULLNAME_RULE),
)

positive_number = validate.Range(min=0, min_inclusive=False, error="Duration must be a positive number")


class UUIDString(fields.UUID):
    """UUID-shaped input kept as its canonical string form."""

    def _deserialize(self, value, attr, data, **kwargs):
        return str(super()._deserialize(value, attr, data, **kwargs))


class StrictBoolean(fields.Boolean):
    """JSON true/false only; no "yes", "true" or 1."""

    def _deserialize(self, value, attr, data, **kwargs):
        if not isinstance(value, bool):
            raise self.make_error("invalid", input=value)
        return value
