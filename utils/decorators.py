from __future__ import annotations
from functools import wraps
import logging

from flask import request, abort
from marshmallow import Schema, ValidationError

from utils.extensions import get_token_service
from utils.tokens import TokenError
from utils.validation import validate

logger = logging.getLogger(__name__)


def bearer_token() -> str | None:
    """Token from an ``Authorization: Bearer <token>`` header, if any."""
    auth = request.headers.get("Authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def jwt_required():
    """
    Gate a view behind a valid access token. The view receives the resolved
    identity as the ``identity`` keyword argument.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = bearer_token()
            if not token:
                abort(401, description="Token not provided")
            try:
                identity = get_token_service().verify_access(token)
            except TokenError as e:
                logger.debug("Access token rejected: %s", e)
                abort(403, description="Invalid token")
            return fn(*args, identity=identity, **kwargs)

        return wrapper

    return decorator


def validate_body(schema: Schema, partial: bool = False):
    """
    Validate the JSON body against ``schema``. The normalized payload is
    passed to the view as ``data``; on failure the view never runs.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            payload = request.get_json(silent=True)
            if payload is None:
                payload = {}
            result = validate(schema, payload, partial=partial)
            if not result.ok:
                raise ValidationError(result.errors)
            return fn(*args, data=result.value, **kwargs)

        return wrapper

    return decorator
