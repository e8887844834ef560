"""Tests for the server-rendered pages."""

from foodmanager.main import _food_type_badge_class, _format_food_timestamp
from foodmanager.models import FoodType


def _form(**overrides: str) -> dict:
    data = {
        "name": "Nasi Goreng",
        "ingredients": "rice, egg",
        "description": "fried rice",
        "type": "uph",
        "image_url": "",
    }
    data.update(overrides)
    return data


def _create(client, payload: dict) -> dict:
    response = client.post("/api/foods", json=payload)
    assert response.status_code == 201
    return response.json()


def test_home_lists_foods_and_counts(auth_client, food_payload) -> None:
    _create(auth_client, food_payload())
    _create(auth_client, food_payload(name="Gado-gado", type="fresh"))

    response = auth_client.get("/")

    assert response.status_code == 200
    assert "Nasi Goreng" in response.text
    assert "Gado-gado" in response.text
    assert '<div class="fs-3 fw-bold" id="count-total">2</div>' in response.text


def test_home_search_filters_rows(auth_client, food_payload) -> None:
    _create(auth_client, food_payload())
    _create(auth_client, food_payload(name="Gado-gado", description="salad", ingredients="peanut", type="fresh"))

    response = auth_client.get("/", params={"search": "goreng"})

    assert "Nasi Goreng" in response.text
    assert "Gado-gado</td>" not in response.text


def test_home_empty_state(auth_client) -> None:
    response = auth_client.get("/")

    assert "No foods yet" in response.text


def test_home_rejects_out_of_range_page(auth_client) -> None:
    assert auth_client.get("/", params={"page": 2**70}).status_code == 422
    assert auth_client.get("/", params={"page": 10**9}).status_code == 200


def test_delete_confirm_quotes_food_name(auth_client, food_payload) -> None:
    created = _create(auth_client, food_payload(name="x');document.title='pwned';('"))

    for path in ("/", f"/foods/{created['id']}"):
        response = auth_client.get(path)

        assert response.status_code == 200
        assert "confirm('Delete x');" not in response.text
        assert "title='pwned'" not in response.text
        assert "x\\u0027);document.title=\\u0027pwned\\u0027" in response.text


def test_create_form_submission(auth_client) -> None:
    assert auth_client.get("/create").status_code == 200

    response = auth_client.post("/create", data=_form(image_url=" https://img.test/a.png "), follow_redirects=False)

    assert response.status_code == 303
    foods = auth_client.get("/api/foods").json()["foods"]
    assert len(foods) == 1
    assert foods[0]["imageUrl"] == "https://img.test/a.png"


def test_create_form_shows_validation_error(auth_client) -> None:
    response = auth_client.post("/create", data=_form(name="  "))

    assert response.status_code == 400
    assert "Missing required fields: name" in response.text
    assert auth_client.get("/api/foods").json()["pagination"]["total"] == 0


def test_detail_page(auth_client, food_payload) -> None:
    created = _create(auth_client, food_payload())

    response = auth_client.get(f"/foods/{created['id']}")

    assert response.status_code == 200
    assert "fried rice" in response.text


def test_detail_page_missing(auth_client) -> None:
    response = auth_client.get("/foods/missing")

    assert response.status_code == 404
    assert "Food not found" in response.text


def test_edit_form_submission(auth_client, food_payload) -> None:
    created = _create(auth_client, food_payload())

    response = auth_client.post(
        f"/foods/{created['id']}",
        data=_form(name="Nasi Goreng Kampung", type="fresh"),
        follow_redirects=False,
    )

    assert response.status_code == 303
    updated = auth_client.get(f"/api/foods/{created['id']}").json()
    assert updated["name"] == "Nasi Goreng Kampung"
    assert updated["type"] == "fresh"


def test_edit_form_rejects_invalid_type(auth_client, food_payload) -> None:
    created = _create(auth_client, food_payload())

    response = auth_client.post(f"/foods/{created['id']}", data=_form(type="bogus"))

    assert response.status_code == 400
    assert "Invalid food type" in response.text
    assert auth_client.get(f"/api/foods/{created['id']}").json() == created


def test_edit_form_on_missing_food(auth_client) -> None:
    valid = auth_client.post("/foods/missing", data=_form())
    invalid = auth_client.post("/foods/missing", data=_form(type="bogus"))

    assert valid.status_code == 404
    assert "Food not found" in valid.text
    assert invalid.status_code == 400
    assert "Invalid food type" in invalid.text


def test_delete_form_on_missing_food(auth_client, food_payload) -> None:
    kept = _create(auth_client, food_payload())

    response = auth_client.post("/foods/missing/delete", follow_redirects=False)

    assert response.status_code == 404
    assert "Food not found" in response.text
    assert auth_client.get(f"/api/foods/{kept['id']}").status_code == 200


def test_delete_form(auth_client, food_payload) -> None:
    created = _create(auth_client, food_payload())

    response = auth_client.post(f"/foods/{created['id']}/delete", follow_redirects=False)
    missing = auth_client.post(f"/foods/{created['id']}/delete", follow_redirects=False)

    assert response.status_code == 303
    assert missing.status_code == 404
    assert auth_client.get("/api/foods").json()["pagination"]["total"] == 0


def test_badge_class_filter() -> None:
    assert _food_type_badge_class(FoodType.FRESH) == "bg-success-subtle text-success"
    assert _food_type_badge_class("uph") == "bg-primary-subtle text-primary"
    assert _food_type_badge_class("other") == "bg-secondary-subtle text-secondary"


def test_timestamp_filter_accepts_strings() -> None:
    assert _format_food_timestamp("2024-05-01T12:00:00+00:00")
