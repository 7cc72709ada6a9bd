# tests/test_upload_api.py
"""
Tests for the SoW upload endpoint.

The parser is patched for most cases; one test sends a broken PDF through
the real PyPDF2 extractor.
"""

import pytest
from pathlib import Path
from unittest.mock import patch

PARSE = "src.pulse.domains.documents.api.parse_sow_pdf"


def pdf_file(content=b"%PDF-1.4 fake", filename="sow.pdf", content_type="application/pdf"):
    return {"sow": (filename, content, content_type)}


@pytest.fixture
def upload_dir(container):
    return Path(container.config.uploads.upload_dir)


@pytest.fixture
def draft():
    from src.pulse.domains.documents.parser import parse_sow_text
    from tests.fixtures.data import SAMPLE_SOW_TEXT

    return parse_sow_text(SAMPLE_SOW_TEXT)


class TestUploadSow:
    """POST /api/upload-sow"""

    def test_returns_parsed_draft(self, client, draft, upload_dir):
        seen = {}

        def fake_parse(path):
            seen["path"] = Path(path)
            seen["existed"] = Path(path).exists()
            return draft

        with patch(PARSE, side_effect=fake_parse):
            response = client.post("/api/upload-sow", files=pdf_file(filename="Acme SoW (v2).pdf"))

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["projectName"] == "Website Redesign"
        assert data["startDate"] == "2024-01-15"
        assert [m["name"] for m in data["milestones"]] == ["Discovery", "Build"]

        assert seen["existed"] is True
        assert seen["path"].parent == upload_dir
        assert seen["path"].name.endswith("-Acme_SoW_v2_.pdf")
        assert not seen["path"].exists()

    def test_no_file(self, client):
        with patch(PARSE) as mock_parse:
            response = client.post("/api/upload-sow", data={"note": "nothing attached"})

        assert response.status_code == 400
        assert response.json()["error"] == "No file uploaded"
        mock_parse.assert_not_called()

    def test_non_pdf_rejected_before_parsing(self, client, upload_dir):
        with patch(PARSE) as mock_parse:
            response = client.post("/api/upload-sow", files=pdf_file(b"hello", "notes.txt", "text/plain"))

        assert response.status_code == 400
        assert response.json()["error"] == "Only PDF files are allowed"
        mock_parse.assert_not_called()
        assert not upload_dir.exists() or list(upload_dir.iterdir()) == []

    def test_too_large(self, client, container):
        container.config.uploads.max_bytes = 1024 * 1024

        with patch(PARSE) as mock_parse:
            response = client.post("/api/upload-sow", files=pdf_file(b"0" * (1024 * 1024 + 1)))

        assert response.status_code == 413
        assert response.json()["error"] == "File too large. Maximum size is 1MB"
        mock_parse.assert_not_called()

    def test_no_project_name(self, client, upload_dir):
        from src.pulse.domains.documents.models import SowDraft

        with patch(PARSE, return_value=SowDraft()):
            response = client.post("/api/upload-sow", files=pdf_file())

        assert response.status_code == 400
        assert response.json()["error"] == "Could not extract project data from PDF"
        assert list(upload_dir.iterdir()) == []

    def test_parser_failure_is_500_and_cleans_up(self, client, upload_dir):
        from src.pulse.domains.documents.extractor import DocumentExtractionError

        with patch(PARSE, side_effect=DocumentExtractionError("bad xref")):
            response = client.post("/api/upload-sow", files=pdf_file())

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Failed to process PDF file", "code": "INTERNAL_ERROR"}
        assert list(upload_dir.iterdir()) == []

    def test_unreadable_pdf_through_real_extractor(self, client, upload_dir):
        response = client.post("/api/upload-sow", files=pdf_file(b"this is not a pdf at all"))

        assert response.status_code == 500
        assert list(upload_dir.iterdir()) == []
