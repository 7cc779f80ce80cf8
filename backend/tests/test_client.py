from __future__ import annotations

import io
import json
from pathlib import Path
from types import SimpleNamespace

import httpx
import pytest

from questionnaire_api.client import (
    CONNECT_ERROR_MESSAGE,
    QuestionnaireClient,
    SaveQuestionnaireError,
    display_value,
    prepare_entries,
)


def _client(handler) -> QuestionnaireClient:
    return QuestionnaireClient(base_url="http://test", transport=httpx.MockTransport(handler))


def test_display_value_for_file_handles(tmp_path):
    attachment = tmp_path / "brief.pdf"
    attachment.write_bytes(b"%PDF")

    assert display_value(Path("/uploads/logo.png")) == "logo.png"
    assert display_value(SimpleNamespace(filename="upload.docx")) == "upload.docx"
    with attachment.open("rb") as fh:
        assert display_value(fh) == "brief.pdf"
    assert display_value(io.BytesIO(b"no name")).getvalue() == b"no name"
    assert display_value(["a", "b"]) == ["a", "b"]
    assert display_value(None) is None


def test_prepare_entries_keeps_other_fields():
    entries = [{"category": "Files", "question": "Logo", "value": Path("art/logo.svg")}]
    assert prepare_entries(entries) == [{"category": "Files", "question": "Logo", "value": "logo.svg"}]


def test_save_posts_payload_and_returns_path():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "filePath": "/json_files/p/questionnaire.json",
                                         "message": "ok"})

    with _client(handler) as client:
        path = client.export_entries([{"category": "A", "question": "Q", "value": Path("x/y.txt")}], "P")

    assert path == "/json_files/p/questionnaire.json"
    assert seen["path"] == "/api/save-questionnaire"
    assert seen["body"] == {
        "data": [{"category": "A", "question": "Q", "value": "y.txt"}],
        "projectName": "P",
        "schemaVersion": "v1",
    }


def test_save_surfaces_server_message():
    def handler(request):
        return httpx.Response(400, json={"success": False, "message": "No sections provided"})

    with _client(handler) as client, pytest.raises(SaveQuestionnaireError, match="No sections provided"):
        client.save({"sections": []}, "P", schema_version="v2")


def test_save_status_fallback_message():
    def handler(request):
        return httpx.Response(502, text="bad gateway")

    with _client(handler) as client, pytest.raises(SaveQuestionnaireError, match="Server error: 502"):
        client.save([], "P")


def test_save_unsuccessful_body():
    def handler(request):
        return httpx.Response(200, json={"success": False})

    with _client(handler) as client, pytest.raises(SaveQuestionnaireError, match="Unknown server error"):
        client.save([], "P")


def test_save_connection_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as client, pytest.raises(SaveQuestionnaireError) as exc:
        client.save([], "P")
    assert str(exc.value) == CONNECT_ERROR_MESSAGE


def test_save_transport_failure_is_readable():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with _client(handler) as client, pytest.raises(SaveQuestionnaireError, match="Request to server failed: timed out"):
        client.save([], "P")
