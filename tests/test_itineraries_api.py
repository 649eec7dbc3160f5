"""
HTTP tests for itineraries and their details, optional add-ons and media.
"""
import pytest

from api.itineraries import load_itineraries
from models import StorageError, StorageErrorKind
from models.details import Details
from models.media import Media
from models.optional_item import OptionalItem


@pytest.fixture
def create_itinerary(client, auth_headers):
    def create(name="Lisbon old town", **extra):
        response = client.post("/itineraries", json={"name": name, **extra}, headers=auth_headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return create


@pytest.fixture
def full_itinerary(client, create_itinerary):
    """Itinerary with details, one optional add-on and one media entry."""
    itinerary = create_itinerary()
    details = client.post(
        "/itineraries/details",
        json={"description": "Walk through Alfama", "costPerPerson": 25, "itinerary_id": itinerary["id"]},
    ).get_json()
    optional = client.post(
        "/itineraries/details/optional",
        json={"title": "Tram ride", "price": 3.5, "detail_id": details["id"]},
    ).get_json()
    media = client.post(
        "/itineraries/media",
        json={"url": "https://example.com/alfama.jpg", "itinerary_id": itinerary["id"]},
    ).get_json()
    return {"itinerary": itinerary, "details": details, "optional": optional, "media": media}


class TestCreateItinerary:

    def test_requires_token(self, client):
        response = client.post("/itineraries", json={"name": "Lisbon"})
        assert response.status_code == 401

    def test_auth_runs_before_validation(self, client):
        response = client.post("/itineraries", json={"name": "x"})
        assert response.status_code == 401

    def test_validation(self, client, auth_headers):
        response = client.post("/itineraries", json={"name": "ab", "cover": "nope"}, headers=auth_headers)
        assert response.status_code == 400
        assert set(response.get_json()["details"]) == {"name", "cover"}

    def test_popular_rejects_truthy_strings(self, client, auth_headers):
        response = client.post("/itineraries", json={"name": "Lisbon", "popular": "yes"}, headers=auth_headers)
        assert response.status_code == 400
        assert set(response.get_json()["details"]) == {"popular"}

    def test_created_for_caller(self, client, registered_user, create_itinerary):
        itinerary = create_itinerary(cover="https://example.com/cover.jpg", popular=True)
        assert itinerary["user_id"] == registered_user["id"]
        assert itinerary["popular"] is True
        assert itinerary["media"] == []
        assert itinerary["details"] is None


class TestReadItineraries:

    def test_listing_order_matches_storage_order(self, client, create_itinerary):
        for name in ("Alpha trip", "Bravo trip", "Charlie trip"):
            create_itinerary(name)
        simplified = client.get("/itineraries?simplified=1").get_json()
        full = client.get("/itineraries").get_json()
        assert [i["name"] for i in full] == [i["name"] for i in simplified]
        assert sorted(i["name"] for i in full) == ["Alpha trip", "Bravo trip", "Charlie trip"]
        assert "media" in full[0] and "media" not in simplified[0]

    def test_fan_out_keeps_requested_order(self, app, storage, create_itinerary):
        ids = [create_itinerary(f"Trip {n}")["id"] for n in range(6)]
        wanted = list(reversed(ids))
        with app.app_context():
            loaded = load_itineraries(storage, wanted, workers=4)
        assert [i["id"] for i in loaded] == wanted

    def test_filters(self, client, registered_user, create_itinerary):
        create_itinerary("Alpha trip")
        create_itinerary("Bravo trip")
        names = [i["name"] for i in client.get("/itineraries?name=ALPHA").get_json()]
        assert names == ["Alpha trip"]
        assert len(client.get(f"/itineraries?user_id={registered_user['id']}").get_json()) == 2
        assert client.get("/itineraries?user_id=someone-else").get_json() == []

    def test_get_with_all_data(self, client, full_itinerary):
        itinerary_id = full_itinerary["itinerary"]["id"]
        body = client.get(f"/itineraries/{itinerary_id}").get_json()
        assert body["details"]["costPerPerson"] == "25.00"
        assert [o["title"] for o in body["details"]["optional"]] == ["Tram ride"]
        assert [m["url"] for m in body["media"]] == ["https://example.com/alfama.jpg"]

    def test_get_unknown(self, client):
        response = client.get("/itineraries/does-not-exist")
        assert response.status_code == 404
        assert response.get_json()["message"] == "Itinerary not found"


class TestUpdateItinerary:

    def test_partial_update(self, client, create_itinerary):
        itinerary = create_itinerary()
        response = client.patch(f"/itineraries/{itinerary['id']}", json={"popular": True})
        assert response.status_code == 200
        assert response.get_json()["popular"] is True
        assert response.get_json()["name"] == itinerary["name"]

    def test_invalid_update(self, client, create_itinerary):
        itinerary = create_itinerary()
        response = client.patch(f"/itineraries/{itinerary['id']}", json={"cover": "nope"})
        assert response.status_code == 400

    def test_unknown(self, client):
        assert client.patch("/itineraries/missing", json={"name": "Porto"}).status_code == 404


class TestDeleteItinerary:

    def test_cascades_children(self, client, storage, full_itinerary):
        itinerary_id = full_itinerary["itinerary"]["id"]
        response = client.delete(f"/itineraries/{itinerary_id}")
        assert response.status_code == 200
        assert response.get_json()["message"] == "Itinerary deleted"
        assert client.get(f"/itineraries/{itinerary_id}").status_code == 404
        assert storage.count(Details) == 0
        assert storage.count(OptionalItem) == 0
        assert storage.count(Media) == 0

    def test_referential_rejection_is_409(self, client, storage, monkeypatch, create_itinerary):
        itinerary = create_itinerary()

        def reject():
            storage.rollback()
            raise StorageError(StorageErrorKind.FOREIGN_KEY_VIOLATION, "FOREIGN KEY constraint failed")

        monkeypatch.setattr(storage, "save", reject)
        response = client.delete(f"/itineraries/{itinerary['id']}")
        assert response.status_code == 409
        assert response.get_json()["message"] == "Conflict: related data still exists."

    def test_unknown(self, client):
        assert client.delete("/itineraries/missing").status_code == 404


class TestDetails:

    def test_create_and_list(self, client, create_itinerary):
        itinerary = create_itinerary()
        response = client.post(
            "/itineraries/details",
            json={
                "description": "Walk through Alfama",
                "meetingPoint": "Sé Cathedral",
                "duration": 2.5,
                "itinerary_id": itinerary["id"],
                "additional": {"accessibility": "Steep streets"},
            },
        )
        assert response.status_code == 201
        body = response.get_json()
        assert body["meetingPoint"] == "Sé Cathedral"
        assert body["additional"] == {"accessibility": "Steep streets"}

        listed = client.get(f"/itineraries/{itinerary['id']}/details").get_json()
        assert [d["id"] for d in listed] == [body["id"]]

    def test_second_details_for_same_itinerary_is_400(self, client, full_itinerary):
        response = client.post(
            "/itineraries/details",
            json={"description": "Another one", "itinerary_id": full_itinerary["itinerary"]["id"]},
        )
        assert response.status_code == 400
        assert response.get_json()["message"] == "Error creating itinerary details"

    def test_unknown_itinerary_is_400(self, client):
        response = client.post(
            "/itineraries/details",
            json={"description": "Orphan", "itinerary_id": "7d0b0f4e-8d4a-4a57-9a53-0f4c1b7c1f11"},
        )
        assert response.status_code == 400

    def test_list_missing(self, client):
        assert client.get("/itineraries/missing/details").status_code == 404

    def test_update(self, client, full_itinerary):
        itinerary_id = full_itinerary["itinerary"]["id"]
        response = client.patch(f"/itineraries/details/{itinerary_id}", json={"tour": "Guided"})
        assert response.status_code == 200
        assert response.get_json()["tour"] == "Guided"
        assert response.get_json()["itinerary_id"] == itinerary_id

    def test_delete_with_optional_children_is_409(self, client, full_itinerary):
        response = client.delete(f"/itineraries/details/{full_itinerary['itinerary']['id']}")
        assert response.status_code == 409

    def test_delete(self, client, create_itinerary):
        itinerary = create_itinerary()
        client.post("/itineraries/details", json={"description": "Short walk", "itinerary_id": itinerary["id"]})
        response = client.delete(f"/itineraries/details/{itinerary['id']}")
        assert response.status_code == 200
        assert client.delete(f"/itineraries/details/{itinerary['id']}").status_code == 404


class TestOptional:

    def test_list_update_delete(self, client, full_itinerary):
        detail_id = full_itinerary["details"]["id"]
        optional_id = full_itinerary["optional"]["id"]
        assert full_itinerary["optional"]["price"] == "3.50"

        listed = client.get(f"/itineraries/details/{detail_id}/optional").get_json()
        assert [o["id"] for o in listed] == [optional_id]

        response = client.patch(f"/itineraries/details/optional/{optional_id}", json={"observations": "Bring cash"})
        assert response.status_code == 200
        assert response.get_json()["observations"] == "Bring cash"

        assert client.delete(f"/itineraries/details/optional/{optional_id}").status_code == 200
        assert client.get(f"/itineraries/details/{detail_id}/optional").status_code == 404

    def test_validation(self, client):
        response = client.post("/itineraries/details/optional", json={"title": "ab", "detail_id": "bad"})
        assert response.status_code == 400
        assert set(response.get_json()["details"]) == {"title", "detail_id"}


class TestMedia:

    def test_list_update_delete(self, client, full_itinerary):
        itinerary_id = full_itinerary["itinerary"]["id"]
        media_id = full_itinerary["media"]["id"]

        listed = client.get(f"/itineraries/{itinerary_id}/media").get_json()
        assert [m["id"] for m in listed] == [media_id]

        response = client.patch(f"/itineraries/media/{media_id}", json={"url": "https://example.com/new.jpg"})
        assert response.status_code == 200
        assert response.get_json()["url"] == "https://example.com/new.jpg"

        assert client.delete(f"/itineraries/media/{media_id}").status_code == 200
        assert client.delete(f"/itineraries/media/{media_id}").status_code == 404

    def test_invalid_url(self, client, create_itinerary):
        itinerary = create_itinerary()
        response = client.post("/itineraries/media", json={"url": "nope", "itinerary_id": itinerary["id"]})
        assert response.status_code == 400
