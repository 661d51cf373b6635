"""Tests for syllabus upload and text analysis."""

import fitz

from courseflow.core.grade_sync import GradeSyncService
from courseflow.llm.client import LLMConnectionError, LLMRateLimitError

SYLLABUS = b"CS 101 Introduction to Programming\nQuiz 1 5%\nFinal exam 35%\n"


class TestUpload:
    """Tests for POST /upload."""

    def test_upload_text_file(self, client, ledger, app_config):
        response = client.post(
            "/upload", files={"syllabus": ("syllabus.txt", SYLLABUS, "text/plain")}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Course created with 6 assessments"
        assert data["course_id"] == 1
        assert data["course"]["name"] == "Introduction to Programming"
        assert data["parsed_data"]["courseName"] == "Introduction to Programming"
        assert data["extracted_info"].startswith("Course Name:")
        assert len(ledger.courses) == 1
        assert list(app_config.ledger.uploads_dir.iterdir()) == []

    def test_upload_pdf(self, client, ledger):
        doc = fitz.open()
        doc.new_page().insert_text((72, 72), SYLLABUS.decode() * 2)
        pdf_bytes = doc.tobytes()
        doc.close()

        response = client.post(
            "/upload", files={"syllabus": ("outline.pdf", pdf_bytes, "application/pdf")}
        )

        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_duplicate_upload(self, client):
        files = {"syllabus": ("syllabus.txt", SYLLABUS, "text/plain")}
        client.post("/upload", files=files)

        response = client.post("/upload", files=files)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert "already exists" in data["message"]

    def test_no_file(self, client):
        response = client.post("/upload")

        assert response.status_code == 400
        assert response.json()["detail"] == "No file uploaded"

    def test_unsupported_extension(self, client):
        response = client.post(
            "/upload", files={"syllabus": ("syllabus.docx", b"PK", "application/octet-stream")}
        )

        assert response.status_code == 400

    def test_unreadable_pdf(self, client, app_config):
        doc = fitz.open()
        doc.new_page()
        pdf_bytes = doc.tobytes()
        doc.close()
        app_config.extraction.ocr_fallback = False

        response = client.post(
            "/upload", files={"syllabus": ("scan.pdf", pdf_bytes, "application/pdf")}
        )

        assert response.status_code == 500
        assert "text input option" in response.json()["detail"]
        assert list(app_config.ledger.uploads_dir.iterdir()) == []

    def test_rate_limited(self, client, mock_llm_client):
        mock_llm_client.simple_chat.side_effect = LLMRateLimitError("429")

        response = client.post(
            "/upload", files={"syllabus": ("syllabus.txt", SYLLABUS, "text/plain")}
        )

        assert response.status_code == 500
        assert "rate limits" in response.json()["detail"]


class TestAnalyzeText:
    """Tests for POST /analyze-text."""

    def test_analyze(self, client, mock_llm_client):
        response = client.post("/analyze-text", json={"text": SYLLABUS.decode()})

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert "Quiz 1 5%" in mock_llm_client.simple_chat.call_args.args[1]

    def test_empty_text(self, client):
        for body in ({}, {"text": "   "}):
            response = client.post("/analyze-text", json=body)

            assert response.status_code == 400
            assert response.json()["detail"] == "No text provided"

    def test_llm_failure(self, client, mock_llm_client, ledger):
        mock_llm_client.simple_chat.side_effect = LLMConnectionError("offline")

        response = client.post("/analyze-text", json={"text": SYLLABUS.decode()})

        assert response.status_code == 500
        assert "offline" in response.json()["detail"]
        assert ledger.courses == []

    def test_mirrors_when_sync_enabled(self, app, client):
        app.state.sync = GradeSyncService()

        client.post("/analyze-text", json={"text": SYLLABUS.decode()})

        assert len(app.state.sync.courses) == 1
