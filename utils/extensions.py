from flask import current_app

from models import DBStorage
from utils.tokens import TokenService


def get_storage() -> DBStorage:
    return current_app.extensions["storage"]


def get_token_service() -> TokenService:
    return current_app.extensions["token_service"]
