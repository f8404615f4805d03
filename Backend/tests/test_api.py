# =============================================================================
# API Route Tests
# =============================================================================
"""
Tests for the HTTP API using FastAPI's TestClient.

Service collaborators are replaced through dependency overrides, so no
request leaves the process.
"""

import asyncio
import io
import json

import docx
import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from jobdesk.api.dependencies import (
    get_company_research_service,
    get_cover_letter_service,
    get_event_counter,
    get_jd_fetch_guard,
    get_resume_service,
)
from jobdesk.api.main import create_app
from jobdesk.api.routes.jd import ClientDisconnectedError, run_until_disconnect
from jobdesk.config import Settings, get_settings
from jobdesk.services.completion import (
    CompanyResearchService,
    CompletionError,
    CompletionTimeoutError,
    CoverLetterService,
)
from jobdesk.services.documents import ResumeTextService
from jobdesk.services.documents.extractor import DOCX_CONTENT_TYPE
from jobdesk.services.fetcher import FetchLimits, JDFetchGuard

from conftest import JOB_PAGE, LONG_HEADING_PAGE, RESEARCH_REPORT


HTML = {"content-type": "text/html"}


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
class FakeCounter:
    """Event counter recording calls in memory."""

    def __init__(self, total: int = 0) -> None:
        self.total = total
        self.events: list[tuple] = []

    async def record(self, event, properties=None, distinct_id=None) -> None:
        self.events.append((event, properties, distinct_id))

    async def count_events(self, event="cover_letter_generated") -> int:
        return self.total


class FakeCompletion:
    """Completion service returning a canned answer or raising."""

    def __init__(self, output: str = "", error: Exception = None) -> None:
        self.output = output
        self.error = error

    async def complete(self, instructions: str, input: str) -> str:
        if self.error is not None:
            raise self.error
        return self.output


def guard_dependency(handler, records: dict[str, str]):
    """Build a fetch guard dependency backed by a mock transport."""

    async def resolver(hostname: str) -> str:
        if hostname not in records:
            raise OSError(f"unknown host {hostname}")
        return records[hostname]

    async def dependency():
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with JDFetchGuard(FetchLimits(), http_client=client, resolver=resolver) as guard:
            yield guard

    return dependency


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None, anthropic_api_key="", max_input_chars=200)


@pytest.fixture
def counter() -> FakeCounter:
    """In-memory event counter."""
    return FakeCounter(total=12)


@pytest.fixture
def app(settings: Settings, counter: FakeCounter) -> FastAPI:
    """
    Create an application with settings and analytics overridden.

    Returns:
        FastAPI application for a single test.
    """
    application = create_app()
    application.dependency_overrides[get_settings] = lambda: settings
    application.dependency_overrides[get_event_counter] = lambda: counter
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Test client for the application."""
    return TestClient(app)


def use_completion(app: FastAPI, completion: FakeCompletion) -> None:
    app.dependency_overrides[get_cover_letter_service] = lambda: CoverLetterService(completion)


def use_research(app: FastAPI, completion: FakeCompletion) -> None:
    app.dependency_overrides[get_company_research_service] = lambda: CompanyResearchService(completion)


# -----------------------------------------------------------------------------
# Job Description Import
# -----------------------------------------------------------------------------
class TestJDFromURL:
    """Tests for POST /api/jd-from-url."""

    def test_structured_page(self, app: FastAPI, client: TestClient) -> None:
        """Test a successful import from a JSON-LD page."""
        app.dependency_overrides[get_jd_fetch_guard] = guard_dependency(
            lambda r: httpx.Response(200, headers=HTML, text=JOB_PAGE),
            {"jobs.example.com": "93.184.216.34"},
        )

        response = client.post("/api/jd-from-url", json={"url": "https://jobs.example.com/1"})

        assert response.status_code == 200
        body = response.json()
        assert body["source"] == "jsonld"
        assert body["host"] == "jobs.example.com"
        assert "Senior Engineer" in body["text"]
        assert body["warnings"] == []

    def test_heuristic_page_warns(self, app: FastAPI, client: TestClient) -> None:
        """Test that heuristic results ask the user to review the text."""
        app.dependency_overrides[get_jd_fetch_guard] = guard_dependency(
            lambda r: httpx.Response(200, headers=HTML, text=LONG_HEADING_PAGE),
            {"jobs.example.com": "93.184.216.34"},
        )

        response = client.post("/api/jd-from-url", json={"url": "https://jobs.example.com/2"})

        assert response.status_code == 200
        assert response.json()["source"] == "heuristics"
        assert len(response.json()["warnings"]) == 1

    @pytest.mark.parametrize(
        ("url", "records", "status_code", "code"),
        [
            ("http://jobs.example.com/", {}, 400, "unsupported_scheme"),
            ("not a url", {}, 400, "invalid_url"),
            ("https://missing.example.com/", {}, 400, "dns_failed"),
            ("https://internal.example.com/", {"internal.example.com": "192.168.0.10"}, 400, "unsupported_address"),
        ],
    )
    def test_rejected_before_fetch(
        self, app: FastAPI, client: TestClient, url: str, records: dict, status_code: int, code: str
    ) -> None:
        """Test that input and address errors map to 400."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        app.dependency_overrides[get_jd_fetch_guard] = guard_dependency(handler, records)

        response = client.post("/api/jd-from-url", json={"url": url})

        assert response.status_code == status_code
        assert response.json()["code"] == code

    @pytest.mark.parametrize(
        ("upstream", "status_code", "code"),
        [
            (httpx.Response(200, headers={"content-type": "image/png"}, content=b"png"), 415, "unsupported_content_type"),
            (httpx.Response(503, headers=HTML, text="down"), 502, "fetch_failed"),
            (httpx.Response(302), 502, "redirect_no_location"),
            (httpx.Response(301, headers={"location": "http://jobs.example.com/"}), 400, "redirect_downgraded"),
            (httpx.Response(200, headers=HTML, content=b"x" * (4 * 1024 * 1024)), 413, "response_too_large"),
        ],
    )
    def test_upstream_failures(
        self, app: FastAPI, client: TestClient, upstream: httpx.Response, status_code: int, code: str
    ) -> None:
        """Test that each upstream failure kind gets its own status."""
        app.dependency_overrides[get_jd_fetch_guard] = guard_dependency(
            lambda r: upstream, {"jobs.example.com": "93.184.216.34"}
        )

        response = client.post("/api/jd-from-url", json={"url": "https://jobs.example.com/"})

        assert response.status_code == status_code
        assert response.json()["code"] == code

    def test_no_extractable_text(self, app: FastAPI, client: TestClient) -> None:
        """Test that unusable pages ask the user to paste the text."""
        app.dependency_overrides[get_jd_fetch_guard] = guard_dependency(
            lambda r: httpx.Response(200, headers=HTML, text="<html><body><p>Hi</p></body></html>"),
            {"jobs.example.com": "93.184.216.34"},
        )

        response = client.post("/api/jd-from-url", json={"url": "https://jobs.example.com/"})

        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "no_extractable_text"
        assert any("manually" in warning for warning in body["warnings"])

    @pytest.mark.parametrize(
        "payload",
        [
            {"url": 123},
            {"url": "https://jobs.example.com/" + "a" * 3000},
            {"url": ["https://jobs.example.com/"]},
        ],
    )
    def test_malformed_body(self, app: FastAPI, client: TestClient, payload: dict) -> None:
        """Test that bodies failing validation get 400 with the standard error shape."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        app.dependency_overrides[get_jd_fetch_guard] = guard_dependency(handler, {})

        response = client.post("/api/jd-from-url", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "invalid_request"
        assert body["error"].startswith("Invalid request")
        assert body["warnings"] == []
        assert "detail" not in body


class TestRunUntilDisconnect:
    """Tests for cancelling work when the client goes away."""

    @pytest.mark.asyncio
    async def test_disconnect_cancels_task(self) -> None:
        """Test that a disconnect cancels the in-flight coroutine."""
        cancelled = asyncio.Event()

        async def slow() -> str:
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise
            return "done"

        class DisconnectedRequest:
            async def is_disconnected(self) -> bool:
                return True

        with pytest.raises(ClientDisconnectedError):
            await run_until_disconnect(DisconnectedRequest(), slow())

        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_result_returned(self) -> None:
        """Test that a finished coroutine's result is returned."""

        async def fast() -> str:
            return "done"

        class ConnectedRequest:
            async def is_disconnected(self) -> bool:
                return False

        assert await run_until_disconnect(ConnectedRequest(), fast()) == "done"


# -----------------------------------------------------------------------------
# Résumé Upload
# -----------------------------------------------------------------------------
class TestExtractResume:
    """Tests for POST /api/extract-resume."""

    def test_docx_upload(self, client: TestClient) -> None:
        """Test that DOCX uploads return their text."""
        document = docx.Document()
        document.add_paragraph("Jane Doe")
        document.add_paragraph("Staff Engineer")
        buffer = io.BytesIO()
        document.save(buffer)

        response = client.post(
            "/api/extract-resume",
            files={"file": ("cv.docx", buffer.getvalue(), DOCX_CONTENT_TYPE)},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["text"] == "Jane Doe\nStaff Engineer"
        assert body["meta"]["chars"] == len(body["text"])
        assert body["warnings"] == []

    def test_unsupported_type(self, client: TestClient) -> None:
        """Test that other file types get 415."""
        response = client.post(
            "/api/extract-resume",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 415
        assert "Only PDF and DOCX" in response.json()["error"]

    def test_too_large(self, app: FastAPI, client: TestClient) -> None:
        """Test that oversized uploads get 413."""
        app.dependency_overrides[get_resume_service] = lambda: ResumeTextService(max_upload_bytes=10)

        response = client.post(
            "/api/extract-resume",
            files={"file": ("cv.pdf", b"%PDF-" + b"x" * 100, "application/pdf")},
        )

        assert response.status_code == 413

    def test_unreadable_pdf(self, client: TestClient) -> None:
        """Test that a broken PDF gives empty text and a warning, not an error."""
        response = client.post(
            "/api/extract-resume",
            files={"file": ("cv.pdf", b"garbage", "application/pdf")},
        )

        assert response.status_code == 200
        assert response.json()["text"] == ""
        assert len(response.json()["warnings"]) == 1


# -----------------------------------------------------------------------------
# Cover Letters
# -----------------------------------------------------------------------------
class TestGenerateCoverLetter:
    """Tests for POST /api/cover-letter/generate."""

    def test_generate(self, app: FastAPI, client: TestClient, counter: FakeCounter) -> None:
        """Test a successful generation and its usage event."""
        use_completion(app, FakeCompletion("Para one.\n\nPara two.\n\nPara three."))

        response = client.post(
            "/api/cover-letter/generate",
            json={"resume": "My resume", "jd": "Company: Acme\nRole: Engineer"},
            headers={"x-ph-distinct-id": "user-1"},
        )

        assert response.status_code == 200
        assert response.json() == {"letter": "Para one.\n\nPara two.\n\nPara three."}
        assert counter.events == [("cover_letter_generated", {"channel": "server"}, "user-1")]

    def test_not_configured(self, client: TestClient) -> None:
        """Test that generation is unavailable without an API key."""
        response = client.post("/api/cover-letter/generate", json={"resume": "a", "jd": "b"})

        assert response.status_code == 503

    @pytest.mark.parametrize("payload", [{"resume": "  ", "jd": "jd"}, {"resume": "resume"}, {}])
    def test_blank_inputs(self, app: FastAPI, client: TestClient, payload: dict) -> None:
        """Test that blank inputs get 400."""
        use_completion(app, FakeCompletion("unused"))

        response = client.post("/api/cover-letter/generate", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == "Both resume and jd are required."

    def test_input_too_long(self, app: FastAPI, client: TestClient) -> None:
        """Test that inputs over the limit get 413."""
        use_completion(app, FakeCompletion("unused"))

        response = client.post("/api/cover-letter/generate", json={"resume": "x" * 201, "jd": "jd"})

        assert response.status_code == 413

    def test_metadata_rejection(self, app: FastAPI, client: TestClient, counter: FakeCounter) -> None:
        """Test that a structured refusal is returned as 422 with its code."""
        refusal = {
            "status": "error",
            "error": "INSUFFICIENT_JD_METADATA",
            "message": "Add the company name and role title.",
        }
        use_completion(app, FakeCompletion(json.dumps(refusal)))

        response = client.post("/api/cover-letter/generate", json={"resume": "r", "jd": "j"})

        assert response.status_code == 422
        assert response.json()["code"] == "INSUFFICIENT_JD_METADATA"
        assert response.json()["error"] == "Add the company name and role title."
        assert counter.events == []

    def test_empty_completion(self, app: FastAPI, client: TestClient) -> None:
        """Test that an empty model response gets 502."""
        use_completion(app, FakeCompletion("   "))

        response = client.post("/api/cover-letter/generate", json={"resume": "r", "jd": "j"})

        assert response.status_code == 502

    def test_timeout(self, app: FastAPI, client: TestClient) -> None:
        """Test that provider timeouts get 504."""
        use_completion(app, FakeCompletion(error=CompletionTimeoutError("Provider timeout")))

        response = client.post("/api/cover-letter/generate", json={"resume": "r", "jd": "j"})

        assert response.status_code == 504
        assert response.json()["error"] == "Provider timeout"


# -----------------------------------------------------------------------------
# Company Research
# -----------------------------------------------------------------------------
class TestCompanyResearch:
    """Tests for POST /api/company-research."""

    def test_research(self, app: FastAPI, client: TestClient, counter: FakeCounter) -> None:
        """Test that the report is split into markdown and json."""
        use_research(app, FakeCompletion("Report about a company\n\n" + json.dumps(RESEARCH_REPORT)))

        response = client.post(
            "/api/company-research",
            json={"company": "Acme", "role_details": {"job_title": "Staff Engineer"}},
            headers={"x-ph-distinct-id": "user-1"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["markdown"] == "Report about a company"
        assert body["json"] == RESEARCH_REPORT
        assert body["warnings"] == []
        assert counter.events == [("company_research_generated", {"channel": "server"}, "user-1")]

    def test_report_without_json(self, app: FastAPI, client: TestClient) -> None:
        """Test that a report without structured data still succeeds."""
        use_research(app, FakeCompletion("## Summary\n\nAcme sells anvils."))

        response = client.post("/api/company-research", json={"company": "Acme"})

        assert response.status_code == 200
        body = response.json()
        assert body["json"] is None
        assert len(body["warnings"]) == 1

    def test_not_configured(self, client: TestClient) -> None:
        """Test that research is unavailable without an API key."""
        response = client.post("/api/company-research", json={"company": "Acme"})

        assert response.status_code == 503

    def test_company_required(self, app: FastAPI, client: TestClient) -> None:
        """Test that a blank company name gets 400."""
        use_research(app, FakeCompletion("unused"))

        response = client.post("/api/company-research", json={"company": "  "})

        assert response.status_code == 400
        assert response.json()["error"] == "Company is required."

    def test_job_description_too_long(self, app: FastAPI, client: TestClient) -> None:
        """Test that an oversized pasted job description gets 413."""
        use_research(app, FakeCompletion("unused"))

        response = client.post(
            "/api/company-research",
            json={"company": "Acme", "role_details": {"jd_text": "x" * 201}},
        )

        assert response.status_code == 413
        assert "role_details.jd_text" in response.json()["error"]

    @pytest.mark.parametrize(
        ("completion", "status_code"),
        [
            (FakeCompletion(error=CompletionTimeoutError("Provider timeout")), 504),
            (FakeCompletion(error=CompletionError("boom")), 502),
            (FakeCompletion("   "), 502),
        ],
    )
    def test_provider_failures(
        self, app: FastAPI, client: TestClient, counter: FakeCounter, completion: FakeCompletion, status_code: int
    ) -> None:
        """Test that provider failures map to gateway errors and record nothing."""
        use_research(app, completion)

        response = client.post("/api/company-research", json={"company": "Acme"})

        assert response.status_code == status_code
        assert counter.events == []

    def test_malformed_hints(self, app: FastAPI, client: TestClient) -> None:
        """Test that a malformed nested field gets the standard 400 body."""
        use_research(app, FakeCompletion("unused"))

        response = client.post(
            "/api/company-research",
            json={"company": "Acme", "company_hints": {"products": "anvils"}},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_request"
        assert "company_hints.products" in response.json()["error"]


# -----------------------------------------------------------------------------
# Stats and Health
# -----------------------------------------------------------------------------
class TestSystemRoutes:
    """Tests for stats, health and error handling."""

    def test_stats(self, client: TestClient, settings: Settings) -> None:
        """Test that the usage counter is reported with the environment."""
        response = client.get("/api/stats")

        assert response.status_code == 200
        assert response.json() == {"total": 12, "env": settings.app_env}

    def test_health(self, client: TestClient) -> None:
        """Test basic liveness."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_llm_health_without_key(self, client: TestClient) -> None:
        """Test that a missing key is reported without contacting the provider."""
        response = client.get("/health/llm")

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is False
        assert body["auth"] == "missing_key"
        assert body["has_key"] is False

    def test_unhandled_error(self, app: FastAPI) -> None:
        """Test that unexpected errors return a generic 500 body."""

        class BrokenService(ResumeTextService):
            def extract(self, upload):
                raise RuntimeError("boom")

        app.dependency_overrides[get_resume_service] = lambda: BrokenService()
        client = TestClient(app, raise_server_exceptions=False)

        response = client.post(
            "/api/extract-resume",
            files={"file": ("cv.pdf", b"%PDF", "application/pdf")},
        )

        assert response.status_code == 500
        assert response.json()["code"] == "internal_server_error"
        assert "boom" not in response.text
