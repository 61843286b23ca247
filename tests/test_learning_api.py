"""
Integration tests for the learning entries table API, including the
older payload shape (scalar category, `date`, bare-URL resources).
"""

import uuid

from app.schemas import LearningEntryCreate, apply_primary_category


class TestApplyPrimaryCategory:
    def test_inserts_at_front(self):
        assert apply_primary_category(["B"], "A") == ["A", "B"]

    def test_moves_existing_to_front_without_duplicates(self):
        assert apply_primary_category(["A", "B", "C"], "C") == ["C", "A", "B"]

    def test_no_primary_keeps_order(self):
        assert apply_primary_category(["A", "B"], None) == ["A", "B"]


class TestLegacyPayload:
    def test_scalar_category_and_date(self):
        entry = LearningEntryCreate.model_validate(
            {"title": "SQL", "category": "DATA", "date": "2024-05-01", "resources": ["https://sqlbolt.com"]}
        )
        row = entry.to_row()

        assert row["categories"] == ["DATA"]
        assert str(row["start_date"]) == "2024-05-01"
        assert row["resources"] == [
            {"title": "https://sqlbolt.com", "url": "https://sqlbolt.com", "type": "link", "completed": False}
        ]


class TestLearningList:
    def test_ordered_by_last_edit(self, client, sample_learning_entries):
        response = client.get("/api/v1/learning-entries")

        assert response.status_code == 200
        assert [e["title"] for e in response.json()] == ["Linear Algebra", "Rust Book"]

    def test_primary_category_is_derived(self, client, sample_learning_entries):
        body = {e["title"]: e for e in client.get("/api/v1/learning-entries").json()}

        assert body["Rust Book"]["category"] == "LANGUAGES"
        assert body["Rust Book"]["categories"] == ["LANGUAGES", "SYSTEMS"]
        assert body["Linear Algebra"]["category"] == "OTHER"

    def test_get_unknown_is_404(self, client):
        assert client.get(f"/api/v1/learning-entries/{uuid.uuid4()}").status_code == 404


class TestLearningCreate:
    def test_create_canonical(self, client):
        response = client.post(
            "/api/v1/learning-entries",
            json={
                "title": "Kubernetes",
                "categories": ["DEVOPS", "CLOUD"],
                "estimated_hours": 20,
                "start_date": "2025-01-10",
                "resources": [{"title": "Docs", "url": "https://kubernetes.io/docs", "type": "docs"}],
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["category"] == "DEVOPS"
        assert body["status"] == "IN_PROGRESS"
        assert body["completed_hours"] == 0
        assert body["start_date"] == "2025-01-10"
        assert body["resources"][0]["completed"] is False

    def test_create_legacy_shape(self, client):
        response = client.post(
            "/api/v1/learning-entries",
            json={"title": "Go", "category": "LANGUAGES", "date": "2024-03-03", "resources": ["https://go.dev/tour"]},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["categories"] == ["LANGUAGES"]
        assert body["start_date"] == "2024-03-03"
        assert body["resources"][0]["url"] == "https://go.dev/tour"

    def test_negative_hours_is_422(self, client):
        response = client.post("/api/v1/learning-entries", json={"title": "x", "completed_hours": -1})
        assert response.status_code == 422


class TestLearningUpdate:
    def test_primary_category_moves_to_front(self, client, sample_learning_entries):
        entry = sample_learning_entries[0]
        response = client.patch(f"/api/v1/learning-entries/{entry.id}", json={"category": "SYSTEMS"})

        assert response.status_code == 200
        assert response.json()["categories"] == ["SYSTEMS", "LANGUAGES"]
        assert response.json()["category"] == "SYSTEMS"

    def test_log_hours_and_complete(self, client, sample_learning_entries):
        entry = sample_learning_entries[0]
        response = client.patch(
            f"/api/v1/learning-entries/{entry.id}",
            json={"completed_hours": 40, "status": "COMPLETED", "progress": 100, "target_date": "2025-02-01"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["completed_hours"] == 40
        assert body["status"] == "COMPLETED"
        assert body["target_date"] == "2025-02-01"
        assert body["start_date"] == "2024-12-01"

    def test_update_unknown_is_404(self, client):
        response = client.patch(f"/api/v1/learning-entries/{uuid.uuid4()}", json={"title": "x"})
        assert response.status_code == 404


class TestLearningDelete:
    def test_delete(self, client, sample_learning_entries):
        entry = sample_learning_entries[0]
        assert client.delete(f"/api/v1/learning-entries/{entry.id}").status_code == 204
        assert client.get(f"/api/v1/learning-entries/{entry.id}").status_code == 404
