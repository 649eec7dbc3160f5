from __future__ import annotations

from flask import Blueprint, jsonify, abort

from models import StorageError
from models.media import Media
from models.schemas.itinerary import MediaSchema, MediaOutSchema
from utils.decorators import validate_body
from utils.extensions import get_storage

bp = Blueprint("media", __name__)

media_schema = MediaSchema()
media_update_schema = MediaSchema(exclude=("itinerary_id",))
media_out_schema = MediaOutSchema()
media_list_out_schema = MediaOutSchema(many=True)


def _get_media_or_404(media_id: str) -> Media:
    media = get_storage().get(Media, media_id)
    if not media:
        abort(404, description="Media not found")
    return media


@bp.get("/itineraries/<itinerary_id>/media")
def get_itinerary_media(itinerary_id: str):
    """
    Media of an itinerary
    ---
    tags:
      - Media
    parameters:
      - { in: path, name: itinerary_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: Media not found }
    """
    rows = get_storage().find_all(Media, itinerary_id=itinerary_id)
    if not rows:
        abort(404, description="Media not found")
    return jsonify(media_list_out_schema.dump(rows)), 200


@bp.post("/itineraries/media")
@validate_body(media_schema)
def create_itinerary_media(data):
    """
    Attach media to an itinerary
    ---
    tags:
      - Media
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            url: { type: string, format: uri }
            itinerary_id: { type: string, format: uuid }
    responses:
      201: { description: Created }
      400: { description: Validation or creation error }
    """
    storage = get_storage()
    media = Media(**data)
    storage.new(media)
    try:
        storage.save()
    except StorageError:
        abort(400, description="Error creating itinerary media")

    return jsonify(media_out_schema.dump(media)), 201


@bp.patch("/itineraries/media/<media_id>")
@validate_body(media_update_schema, partial=True)
def update_itinerary_media(media_id: str, data):
    """
    Change the URL of a media entry
    ---
    tags:
      - Media
    parameters:
      - { in: path, name: media_id, type: string, required: true }
      - { in: body, name: body, schema: { type: object, properties: { url: { type: string } } } }
    responses:
      200: { description: OK }
      404: { description: Media not found }
    """
    storage = get_storage()
    media = _get_media_or_404(media_id)
    for key, value in data.items():
        setattr(media, key, value)
    storage.new(media)
    try:
        storage.save()
    except StorageError:
        abort(400, description="Error updating itinerary media")

    return jsonify(media_out_schema.dump(media)), 200


@bp.delete("/itineraries/media/<media_id>")
def delete_itinerary_media(media_id: str):
    """
    Delete a media entry
    ---
    tags:
      - Media
    parameters:
      - { in: path, name: media_id, type: string, required: true }
    responses:
      200: { description: Itinerary media deleted }
      404: { description: Media not found }
    """
    storage = get_storage()
    storage.delete(_get_media_or_404(media_id))
    storage.save()
    return jsonify({"message": "Itinerary media deleted"}), 200
