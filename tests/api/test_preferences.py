"""Tests for preference endpoints."""

from fastapi.testclient import TestClient


def create_preference(client: TestClient, **fields) -> dict:
    """Create a preference through the API."""
    response = client.post("/preferences", json=fields)
    assert response.status_code == 201, response.text
    return response.json()


class TestPreferences:
    """Tests for /preferences."""

    def test_create_derives_type_id(self, client: TestClient) -> None:
        """Test a blank type id is derived from the name."""
        data = create_preference(client, name="Low FODMAP", type="diet", ingredients=["Onion"])
        assert data["type_id"] == "low_fodmap"
        assert data["ingredients"] == ["Onion"]

    def test_create_blank_name(self, client: TestClient) -> None:
        """Test preferences need a name."""
        response = client.post("/preferences", json={"name": "", "type": "diet"})
        assert response.status_code == 422

    def test_ingredient_map(self, client: TestClient) -> None:
        """Test creating a preference from an ingredient map upload."""
        response = client.post(
            "/preferences/ingredient-map",
            json={
                "name": "Candida",
                "type": "diet",
                "payload": {"candida_unfriendly": ["sugar", "yeast"]},
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["type_id"] == "candida_unfriendly"
        assert data["ingredients"] == ["sugar", "yeast"]

    def test_ingredient_map_without_array(self, client: TestClient) -> None:
        """Test uploads without an ingredient array are rejected."""
        response = client.post(
            "/preferences/ingredient-map",
            json={"name": "Candida", "payload": {"candida": "sugar"}},
        )
        assert response.status_code == 422

    def test_list_filter_and_types(self, client: TestClient) -> None:
        """Test filtering by type and listing types."""
        create_preference(client, name="Keto", type="diet")
        create_preference(client, name="Peanut", type="allergy")
        create_preference(client, name="Vegan", type="diet")

        data = client.get("/preferences", params={"type": "diet"}).json()
        assert [item["name"] for item in data["items"]] == ["Keto", "Vegan"]

        data = client.get("/preferences", params={"search": "pea"}).json()
        assert [item["name"] for item in data["items"]] == ["Peanut"]

        assert client.get("/preferences/types").json()["types"] == ["allergy", "diet"]

    def test_get_update_delete(self, client: TestClient) -> None:
        """Test reading, replacing and deleting a preference."""
        preference_id = create_preference(client, name="Keto", type="diet")["id"]

        response = client.put(
            f"/preferences/{preference_id}",
            json={"name": "Keto", "type": "diet", "typeId": "keto_strict"},
        )
        assert response.status_code == 200
        assert client.get(f"/preferences/{preference_id}").json()["type_id"] == "keto_strict"

        assert client.delete(f"/preferences/{preference_id}").status_code == 204
        assert client.get(f"/preferences/{preference_id}").status_code == 404
