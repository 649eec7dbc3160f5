"""
Request payload validation on top of marshmallow schemas.

validate() never raises for bad input: it returns a ValidationResult holding
either the normalized value (defaults applied, unknown fields stripped) or the
field-level error messages, never both.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from marshmallow import Schema, ValidationError


@dataclass(frozen=True)
class ValidationResult:
    value: Optional[Dict[str, Any]] = None
    errors: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.errors is None


def validate(schema: Schema, payload: Any, partial: bool = False) -> ValidationResult:
    try:
        value = schema.load(payload, partial=partial)
    except ValidationError as err:
        messages = err.messages if isinstance(err.messages, dict) else {"_schema": err.messages}
        return ValidationResult(errors=messages)
    return ValidationResult(value=value)
