from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from flask import Blueprint, request, jsonify, abort, current_app
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from models import DBStorage, StorageError, StorageErrorKind
from models.itinerary import Itinerary
from models.details import Details
from models.optional_item import OptionalItem
from models.media import Media
from models.schemas.itinerary import ItinerarySchema, ItineraryOutSchema, ItinerarySummaryOutSchema
from utils.decorators import jwt_required, validate_body
from utils.extensions import get_storage

bp = Blueprint("itineraries", __name__)

itinerary_schema = ItinerarySchema()
itinerary_out_schema = ItineraryOutSchema()
itinerary_summary_list_schema = ItinerarySummaryOutSchema(many=True)

WITH_ALL_DATA = (
    selectinload(Itinerary.media),
    selectinload(Itinerary.details).selectinload(Details.optional),
)


def load_itinerary(storage: DBStorage, itinerary_id: str) -> Optional[dict]:
    """Itinerary with media, details and optional add-ons, serialized."""
    itinerary = (
        storage.get_session()
        .query(Itinerary)
        .options(*WITH_ALL_DATA)
        .filter(Itinerary.id == itinerary_id)
        .first()
    )
    return itinerary_out_schema.dump(itinerary) if itinerary else None


def load_itineraries(storage: DBStorage, ids: List[str], workers: int) -> List[dict]:
    """
    One lookup per itinerary, run concurrently. Results come back in the
    order of ``ids``, whatever order the lookups finish in.
    """
    if not ids:
        return []

    def load(itinerary_id):
        # Each worker thread gets its own scoped session; drop it when done
        try:
            return load_itinerary(storage, itinerary_id)
        finally:
            storage.close()

    with ThreadPoolExecutor(max_workers=max(1, min(workers, len(ids)))) as pool:
        results = list(pool.map(load, ids))
    # Rows deleted between the listing and the lookup are skipped
    return [item for item in results if item is not None]


@bp.get("/itineraries")
def list_itineraries():
    """
    List itineraries
    ---
    tags:
      - Itineraries
    parameters:
      - { in: query, name: name, type: string, description: "case-insensitive substring match" }
      - { in: query, name: user_id, type: string }
      - { in: query, name: simplified, type: string, description: "any value returns the rows without media/details" }
    responses:
      200: { description: OK }
    """
    storage = get_storage()
    name = request.args.get("name")
    user_id = request.args.get("user_id")
    simplified = request.args.get("simplified")

    criteria = []
    if name:
        criteria.append(Itinerary.name.ilike(f"%{name}%"))
    if user_id:
        criteria.append(Itinerary.user_id == user_id)
    rows = storage.find_all(Itinerary, *criteria)

    if simplified:
        return jsonify(itinerary_summary_list_schema.dump(rows)), 200

    ids = [row.id for row in rows]
    return jsonify(load_itineraries(storage, ids, current_app.config["LISTING_FANOUT_WORKERS"])), 200


@bp.get("/itineraries/<itinerary_id>")
def get_itinerary(itinerary_id: str):
    """
    Get one itinerary with all its data
    ---
    tags:
      - Itineraries
    parameters:
      - { in: path, name: itinerary_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: Itinerary not found }
    """
    itinerary = load_itinerary(get_storage(), itinerary_id)
    if itinerary is None:
        abort(404, description="Itinerary not found")
    return jsonify(itinerary), 200


@bp.post("/itineraries")
@jwt_required()
@validate_body(itinerary_schema)
def create_itinerary(identity, data):
    """
    Create an itinerary owned by the caller
    ---
    tags:
      - Itineraries
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            name: { type: string, minLength: 3 }
            cover: { type: string, format: uri }
            popular: { type: boolean }
    responses:
      201: { description: Created }
      400: { description: Validation or creation error }
      401: { description: Token not provided }
      403: { description: Invalid token }
    """
    storage = get_storage()
    itinerary = Itinerary(
        name=data["name"],
        cover=data.get("cover"),
        popular=data.get("popular"),
        user_id=identity.user_id,
    )
    storage.new(itinerary)
    try:
        storage.save()
    except StorageError:
        abort(400, description="Error creating itinerary")

    return jsonify(load_itinerary(storage, itinerary.id)), 201


@bp.patch("/itineraries/<itinerary_id>")
@validate_body(itinerary_schema, partial=True)
def update_itinerary(itinerary_id: str, data):
    """
    Update an itinerary
    ---
    tags:
      - Itineraries
    parameters:
      - { in: path, name: itinerary_id, type: string, required: true }
      - in: body
        name: body
        schema:
          type: object
          properties:
            name: { type: string }
            cover: { type: string }
            popular: { type: boolean }
    responses:
      200: { description: OK }
      404: { description: Itinerary not found }
    """
    storage = get_storage()
    itinerary = storage.get(Itinerary, itinerary_id)
    if not itinerary:
        abort(404, description="Itinerary not found")

    for key, value in data.items():
        setattr(itinerary, key, value)
    storage.new(itinerary)
    try:
        storage.save()
    except StorageError:
        abort(400, description="Error updating itinerary")

    return jsonify(load_itinerary(storage, itinerary.id)), 200


@bp.delete("/itineraries/<itinerary_id>")
def delete_itinerary(itinerary_id: str):
    """
    Delete an itinerary with its optional add-ons, details and media
    ---
    tags:
      - Itineraries
    parameters:
      - { in: path, name: itinerary_id, type: string, required: true }
    responses:
      200: { description: Itinerary deleted }
      404: { description: Itinerary not found }
      409: { description: Related data still exists }
    """
    storage = get_storage()
    itinerary = storage.get(Itinerary, itinerary_id)
    if not itinerary:
        abort(404, description="Itinerary not found")

    # Children first, all in one transaction
    detail_ids = select(Details.id).where(Details.itinerary_id == itinerary_id)
    try:
        storage.delete_where(OptionalItem, OptionalItem.detail_id.in_(detail_ids))
        storage.delete_where(Details, itinerary_id=itinerary_id)
        storage.delete_where(Media, itinerary_id=itinerary_id)
        storage.delete(itinerary)
        storage.save()
    except StorageError as err:
        if err.kind is StorageErrorKind.FOREIGN_KEY_VIOLATION:
            abort(409, description="Conflict: related data still exists.")
        raise

    return jsonify({"message": "Itinerary deleted"}), 200
