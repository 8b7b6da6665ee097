"""Tests for the bootstrap error-reporting strategies."""

from pathlib import Path

from steeple.errors import RequirementError
from steeple.http.fields import Headers, QueryParams
from steeple.http.request import Request
from steeple.server.reporting import (
    DebugPageReporter,
    PlainTextReporter,
    requirement_failure_response,
)


async def _no_body() -> dict:
    return {"type": "http.request", "body": b"", "more_body": False}


def _request() -> Request:
    return Request(
        method="GET",
        path="/crm/list-events",
        headers=Headers(),
        query=QueryParams(),
        http_version="1.1",
        client=None,
        cookies={},
        _receive=_no_body,
    )


def test_requirement_failure_response() -> None:
    response = requirement_failure_response(RequirementError("manifest missing"))
    assert response.status == 500
    assert response.content_type == "text/plain; charset=utf-8"
    assert response.text == (
        "Critical System Error: manifest missing\n\n"
        "Please contact your system administrator or check your installation."
    )


def test_plain_text_reporter() -> None:
    response = PlainTextReporter().report(LookupError("x"), _request())
    assert response.status == 500
    assert response.text == "Unhandled Exception: LookupError\n"


def test_debug_page_reporter(tmp_path: Path) -> None:
    reporter = DebugPageReporter(config_path=tmp_path / "config.toml", app_name="ChurchCRM")
    response = reporter.report(LookupError("x"), _request())
    assert response.status == 500
    assert response.content_type.startswith("text/html")
    assert "Unhandled Exception while loading ChurchCRM" in response.text
