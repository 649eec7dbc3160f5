from flask import Blueprint
from sqlalchemy import text

from utils.extensions import get_storage

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    """
    Health check
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
        schema:
          type: object
          properties:
            status:
              type: string
              example: ok
            database:
              type: string
              example: ok
            version:
              type: string
              example: 1.0.0
    """
    get_storage().get_session().execute(text("SELECT 1"))
    return {"status": "ok", "database": "ok", "version": "1.0.0"}, 200
