# tests/api/test_crimebook_endpoint.py

"""
Tests for the /crimebook endpoints: status codes and JSON bodies for every
verb and path, using Flask's test client and an in-memory crime book.
"""

import json

import pytest
from werkzeug.exceptions import ClientDisconnected

from src.crimebook_service.app import create_app
from src.crimebook_service.store.crime_book import CrimeBook


@pytest.fixture
def book():
    """Five entries; the 2nd and 5th are in district A1."""
    book = CrimeBook()
    districts = ["D14", "A1", "D4", "B3", "A1"]
    for n, district in enumerate(districts):
        book.add_entry({
            "IncidentNumber": f"I18207094{n}",
            "OffenseCode": "03114" if n % 2 else "00619",
            "OffenseCodeGroup": "Investigate Property" if n % 2 else "Larceny",
            "District": district,
            "Street": "LINCOLN ST",
        })
    return book


@pytest.fixture
def client(book):
    app = create_app(book)
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def test_get_all_entries(client):
    response = client.get("/crimebook")
    data = response.get_json()

    assert response.status_code == 200
    assert isinstance(data, list)
    assert [e["ID"] for e in data] == [0, 1, 2, 3, 4]
    assert data[0]["IncidentNumber"] == "I182070940"
    assert data[0]["Location"] == ""


def test_get_all_entries_empty():
    app = create_app(CrimeBook())
    with app.test_client() as client:
        response = client.get("/crimebook")

    assert response.status_code == 200
    assert response.get_json() == []


def test_filter_on_district(client):
    response = client.get("/crimebook?District=A1")
    data = response.get_json()

    assert response.status_code == 200
    assert [e["ID"] for e in data] == [1, 4]
    assert all(e["District"] == "A1" for e in data)


@pytest.mark.parametrize("query, expected_ids", [
    ("IncidentNumber=I182070942", [2]),
    ("OffenseCode=03114", [1, 3]),
    ("OffenseCodeGroup=Larceny", [0, 2, 4]),
    ("District=Z9", []),
])
def test_filter_on_each_field(client, query, expected_ids):
    response = client.get(f"/crimebook?{query}")

    assert response.status_code == 200
    assert [e["ID"] for e in response.get_json()] == expected_ids


def test_filter_with_two_parameters_is_rejected(client):
    response = client.get("/crimebook?District=A1&OffenseCode=00619")

    assert response.status_code == 500
    assert "error" in response.get_json()


def test_filter_with_repeated_parameter_is_rejected(client):
    response = client.get("/crimebook?District=A1&District=D4")
    assert response.status_code == 500


def test_filter_on_unknown_field_is_rejected(client):
    response = client.get("/crimebook?Street=LINCOLN%20ST")

    assert response.status_code == 500
    assert "error" in response.get_json()


def test_get_single_entry(client):
    response = client.get("/crimebook/2")
    data = response.get_json()

    assert response.status_code == 200
    assert data["ID"] == 2
    assert data["District"] == "D4"


@pytest.mark.parametrize("entry_id", ["5", "-1", "abc", "1.5", "1_0", "%203", "+3", "\u0663"])
def test_get_single_entry_not_found(client, entry_id):
    response = client.get(f"/crimebook/{entry_id}")

    assert response.status_code == 404
    assert response.get_json() == {"error": "entry not found"}


def test_get_deleted_entry_is_not_found(client):
    client.delete("/crimebook/3")

    response = client.get("/crimebook/3")
    assert response.status_code == 404


def test_create_entry(client, book):
    payload = {
        "IncidentNumber": "I182070999",
        "OffenseCode": "00301",
        "OffenseCodeGroup": "Robbery",
        "District": "C6",
        "Street": "MASSACHUSETTS AVE",
    }
    response = client.post("/crimebook", data=json.dumps(payload), content_type="application/json")

    assert response.status_code == 200
    assert response.get_json() == {"message": "new entry created", "ID": 5}

    fetched = client.get("/crimebook/5").get_json()
    for key, value in payload.items():
        assert fetched[key] == value
    assert fetched["Shooting"] == ""


def test_create_entry_ignores_client_id(client):
    response = client.post("/crimebook", json={"ID": 0, "IncidentNumber": "I1"})

    assert response.status_code == 200
    assert response.get_json()["ID"] == 5
    # entry 0 is unchanged
    assert client.get("/crimebook/0").get_json()["IncidentNumber"] == "I182070940"


def test_create_entry_without_json_content_type(client):
    """The body is parsed as JSON whatever the content type says."""
    response = client.post("/crimebook", data='{"District": "A1"}', content_type="text/plain")
    assert response.status_code == 200


@pytest.mark.parametrize("body", [
    "",
    "not json",
    '{"District": "A1"',
    '["a", "b"]',
    '{"District": 12}',
    '{"ID": "five"}',
])
def test_create_entry_invalid_json(client, book, body):
    response = client.post("/crimebook", data=body, content_type="application/json")

    assert response.status_code == 400
    assert response.get_json()["error"] == "invalid JSON data"
    assert len(book) == 5


def test_create_entry_body_read_error(client, mocker):
    mocker.patch(
        "flask.wrappers.Request.get_data",
        side_effect=ClientDisconnected()
    )

    response = client.post("/crimebook", json={"District": "A1"})
    assert response.status_code == 500


def test_get_all_entries_serialization_error(client, mocker):
    """An entry that cannot be encoded as JSON turns into a 500, not a crash."""
    mocker.patch(
        "src.crimebook_service.api.crimebook.entries_to_list",
        return_value=[{"ID": object()}]
    )

    response = client.get("/crimebook")

    assert response.status_code == 500
    assert response.get_json() == {"error": "internal error"}


def test_get_single_entry_serialization_error(client, mocker):
    mocker.patch(
        "src.crimebook_service.models.CrimeDataEntry.to_dict",
        return_value={"ID": object()}
    )

    response = client.get("/crimebook/2")

    assert response.status_code == 500
    assert response.get_json() == {"error": "internal error"}


def test_create_entry_with_null_fields(client):
    """null leaves a field empty, the same as leaving it out."""
    response = client.post("/crimebook", json={"ID": None, "District": "A1", "Shooting": None})

    assert response.status_code == 200
    fetched = client.get(f"/crimebook/{response.get_json()['ID']}").get_json()
    assert fetched["District"] == "A1"
    assert fetched["Shooting"] == ""


def test_post_to_entry_not_allowed(client, book):
    response = client.post("/crimebook/1", json={"District": "A1"})

    assert response.status_code == 405
    assert response.get_json() == {"error": "method not allowed"}
    assert len(book) == 5


def test_delete_all_entries(client):
    response = client.delete("/crimebook")

    assert response.status_code == 200
    assert response.get_json() == {"message": "collection deleted"}
    assert client.get("/crimebook").get_json() == []

    # IDs start over after the collection is deleted
    created = client.post("/crimebook", json={"District": "A1"}).get_json()
    assert created["ID"] == 0


def test_delete_entry(client):
    response = client.delete("/crimebook/1")

    assert response.status_code == 200
    assert response.get_json() == {"message": "entry deleted"}

    ids = [e["ID"] for e in client.get("/crimebook").get_json()]
    assert ids == [0, 2, 3, 4]


@pytest.mark.parametrize("entry_id", ["abc", "1_0", "%203", "+3", "\u0663"])
def test_delete_entry_non_numeric_id(client, book, entry_id):
    """Only plain ASCII digits count as an entry id; nothing gets deleted otherwise."""
    response = client.delete(f"/crimebook/{entry_id}")

    assert response.status_code == 400
    assert "error" in response.get_json()
    assert book.count_entries() == 5


@pytest.mark.parametrize("entry_id", ["5", "-1", "99"])
def test_delete_entry_not_found(client, entry_id):
    response = client.delete(f"/crimebook/{entry_id}")

    assert response.status_code == 404
    assert response.get_json() == {"error": "entry not found"}


def test_created_id_not_reused_after_delete(client):
    client.delete("/crimebook/4")

    created = client.post("/crimebook", json={"District": "A1"}).get_json()
    assert created["ID"] == 5


def test_unsupported_method_on_collection(client):
    response = client.put("/crimebook", json={})
    assert response.status_code == 405


def test_custom_resource_path(book):
    app = create_app(book, path="/crimes")
    with app.test_client() as client:
        assert client.get("/crimes/0").status_code == 200
        assert client.get("/crimebook").status_code == 404
