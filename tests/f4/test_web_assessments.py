"""Tests for the assessment and grade endpoints."""

import pytest

BASE = "/api/courses/1/assessments"


class TestListAssessments:
    """Tests for GET /api/courses/{id}/assessments."""

    def test_list(self, seeded_client):
        response = seeded_client.get(BASE)

        assert response.status_code == 200
        data = response.json()
        assert data["course_id"] == 1
        assert data["count"] == 6
        final = data["assessments"][-1]
        assert final["title"] == "Final Exam"
        assert final["type"] == "final"
        assert final["due_date"] == "2024-05-10"
        assert final["weight"] == 35
        assert final["grade"] is None

    def test_unknown_course(self, client):
        assert client.get(BASE).status_code == 404


class TestCreateAssessment:
    """Tests for POST /api/courses/{id}/assessments."""

    def test_create(self, seeded_client, seeded_ledger):
        response = seeded_client.post(
            BASE,
            json={"title": "Lab 1", "type": "quiz", "weight": 5, "due_date": "2024-04-02"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == 7
        assert data["course_id"] == 1
        assert seeded_ledger.get_assessment(1, 7).title == "Lab 1"

    @pytest.mark.parametrize(
        "body",
        [
            {"title": ""},
            {"title": "Lab", "type": "presentation"},
            {"title": "Lab", "weight": 120},
        ],
    )
    def test_invalid(self, seeded_client, body):
        assert seeded_client.post(BASE, json=body).status_code == 400

    def test_unknown_course(self, client):
        assert client.post(BASE, json={"title": "Lab 1"}).status_code == 404


class TestUpdateAssessment:
    """Tests for PUT /api/courses/{id}/assessments/{aid}."""

    def test_update(self, seeded_client):
        response = seeded_client.put(f"{BASE}/4", json={"title": "Essay", "weight": 20})

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Essay"
        assert data["weight"] == 20
        assert data["type"] == "assignment"

    def test_not_found(self, seeded_client):
        assert seeded_client.put(f"{BASE}/42", json={"title": "x"}).status_code == 404


class TestDeleteAssessment:
    """Tests for DELETE /api/courses/{id}/assessments/{aid}."""

    def test_delete(self, seeded_client, seeded_ledger):
        assert seeded_client.delete(f"{BASE}/2").status_code == 204

        assert seeded_ledger.get_assessment(1, 2) is None
        assert len(seeded_ledger.get_course_by_id(1).assessments) == 5

    def test_not_found(self, seeded_client):
        assert seeded_client.delete(f"{BASE}/99").status_code == 404


class TestGrades:
    """Tests for recording and clearing grades."""

    def test_set_grade(self, seeded_client, seeded_ledger):
        response = seeded_client.post(f"{BASE}/3/grade", json={"grade": 92})

        assert response.status_code == 200
        assert response.json()["grade"] == 92
        assert seeded_ledger.get_course_by_id(1).get_assessment(3).grade == 92

    def test_zero_is_a_grade(self, seeded_client, seeded_ledger):
        seeded_client.post(f"{BASE}/3/grade", json={"grade": 0})

        assert seeded_ledger.get_assessment(1, 3).grade == 0

    def test_grade_required(self, seeded_client):
        for body in ({}, {"grade": None}):
            response = seeded_client.post(f"{BASE}/3/grade", json=body)

            assert response.status_code == 400
            assert response.json()["detail"] == "Grade is required"

    def test_grade_out_of_range(self, seeded_client):
        assert seeded_client.post(f"{BASE}/3/grade", json={"grade": 101}).status_code == 400

    def test_grade_nan_rejected(self, seeded_client, seeded_ledger):
        response = seeded_client.post(
            f"{BASE}/3/grade",
            content='{"grade": NaN}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert seeded_ledger.get_assessment(1, 3).grade is None

    def test_grade_not_a_number(self, seeded_client):
        assert seeded_client.post(f"{BASE}/3/grade", json={"grade": "A+"}).status_code == 422

    def test_unknown_assessment(self, seeded_client):
        assert seeded_client.post(f"{BASE}/77/grade", json={"grade": 50}).status_code == 404

    def test_clear_grade(self, seeded_client, seeded_ledger):
        seeded_client.post(f"{BASE}/3/grade", json={"grade": 92})

        response = seeded_client.delete(f"{BASE}/3/grade")

        assert response.status_code == 200
        assert response.json()["grade"] is None
        assert seeded_ledger.get_assessment(1, 3).grade is None

    def test_grade_reflected_in_course(self, seeded_client):
        seeded_client.post(f"{BASE}/1/grade", json={"grade": 80})

        data = seeded_client.get("/api/courses").json()

        assert data["courses"][0]["current_grade"] == 80
