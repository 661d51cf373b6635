"""Tests for the course endpoints."""

import pytest


class TestListCourses:
    """Tests for GET /api/courses."""

    def test_empty(self, client):
        response = client.get("/api/courses")

        assert response.status_code == 200
        assert response.json() == {"courses": [], "count": 0}

    def test_lists_course(self, seeded_client):
        response = seeded_client.get("/api/courses")

        data = response.json()
        assert data["count"] == 1
        course = data["courses"][0]
        assert course["id"] == 1
        assert course["name"] == "Introduction to Programming"
        assert course["assessment_count"] == 6
        assert course["current_grade"] is None
        assert course["color"].startswith("#")


class TestGetCourse:
    """Tests for GET /api/courses/{id}."""

    def test_detail(self, seeded_client):
        response = seeded_client.get("/api/courses/1")

        assert response.status_code == 200
        data = response.json()
        assert data["instructor"] == "Dr. Jane Smith"
        assert [a["title"] for a in data["assessments"]][:2] == ["Quiz 1", "Quiz 2"]
        assert data["office_hours"] == ["Monday, 2-4pm, Room 101"]
        assert data["grade_summary"]["message"] == "No goal grade set."

    def test_not_found(self, client):
        response = client.get("/api/courses/99")

        assert response.status_code == 404

    def test_non_numeric_id(self, client):
        assert client.get("/api/courses/abc").status_code == 422


class TestUpdateGoalGrade:
    """Tests for PUT /api/courses/{id}."""

    def test_set_goal(self, seeded_client, seeded_ledger):
        response = seeded_client.put("/api/courses/1", json={"goal_grade": 85})

        assert response.status_code == 200
        assert response.json()["goal_grade"] == 85
        assert seeded_ledger.get_course_by_id(1).goal_grade == 85

    def test_clear_goal(self, seeded_client, seeded_ledger):
        seeded_client.put("/api/courses/1", json={"goal_grade": 85})

        response = seeded_client.put("/api/courses/1", json={"goal_grade": None})

        assert response.status_code == 200
        assert seeded_ledger.get_course_by_id(1).goal_grade is None

    def test_missing_goal(self, seeded_client):
        response = seeded_client.put("/api/courses/1", json={})

        assert response.status_code == 400
        assert response.json()["detail"] == "Goal grade is required"

    @pytest.mark.parametrize("value", [-5, 100.5])
    def test_out_of_range(self, seeded_client, value):
        response = seeded_client.put("/api/courses/1", json={"goal_grade": value})

        assert response.status_code == 400

    def test_not_found(self, client):
        assert client.put("/api/courses/5", json={"goal_grade": 80}).status_code == 404


class TestDeleteCourse:
    """Tests for DELETE /api/courses/{id}."""

    def test_delete(self, seeded_client, seeded_ledger):
        response = seeded_client.delete("/api/courses/1")

        assert response.status_code == 204
        assert seeded_ledger.courses == []
        assert seeded_ledger.assessments == []

    def test_not_found(self, client):
        assert client.delete("/api/courses/1").status_code == 404


class TestRequiredGrade:
    """Tests for GET /api/courses/{id}/required-grade."""

    def test_requires_goal(self, seeded_client):
        response = seeded_client.get("/api/courses/1/required-grade")

        assert response.status_code == 400
        assert response.json()["detail"] == "No goal grade set for this course"

    def test_projection(self, seeded_client):
        seeded_client.put("/api/courses/1", json={"goal_grade": 80})

        response = seeded_client.get("/api/courses/1/required-grade")

        assert response.status_code == 200
        data = response.json()
        assert len(data["required_grades"]) == 6
        assert all(r["required_grade"] == pytest.approx(80.0) for r in data["required_grades"])
        assert data["remaining_weight"] == 100

    def test_after_grading(self, seeded_client):
        """Quizzes at 100 lower what the rest needs."""
        seeded_client.put("/api/courses/1", json={"goal_grade": 80})
        seeded_client.post("/api/courses/1/assessments/1/grade", json={"grade": 100})
        seeded_client.post("/api/courses/1/assessments/2/grade", json={"grade": 100})

        data = seeded_client.get("/api/courses/1/required-grade").json()

        assert data["current_grade"] == 100
        assert [r["assessment_id"] for r in data["required_grades"]] == [3, 4, 5, 6]
        # (80 * 100 - 1000) / 90
        assert data["required_grades"][0]["required_grade"] == pytest.approx(77.7778, rel=1e-4)

    def test_all_graded(self, seeded_client):
        seeded_client.put("/api/courses/1", json={"goal_grade": 80})
        for assessment_id in range(1, 7):
            seeded_client.post(
                f"/api/courses/1/assessments/{assessment_id}/grade", json={"grade": 90}
            )

        response = seeded_client.get("/api/courses/1/required-grade")

        assert response.status_code == 400
        assert response.json()["detail"] == "No ungraded assessments remaining"

    def test_not_found(self, client):
        assert client.get("/api/courses/3/required-grade").status_code == 404


class TestClearAll:
    """Tests for DELETE /api/clear-all."""

    def test_clear_all(self, seeded_client, seeded_ledger):
        response = seeded_client.delete("/api/clear-all")

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "All courses cleared"}
        assert seeded_ledger.courses == []
        assert seeded_ledger.next_course_id == 1
