"""Integration tests: full wizard runs against a mocked resume backend."""

import httpx
import pytest
from pytest_httpx import HTTPXMock

from resume_optimizer.config import Settings
from resume_optimizer.main import build_components
from resume_optimizer.models.profile import Education, ProfileForm
from resume_optimizer.models.state import FlowVariant, Stage
from resume_optimizer.models.task import ResumeFile

BASE_URL = "http://backend:8000"
EMAIL = "ada@example.com"
MATCH_SCORE = {
    "match_rate": 58,
    "expected_rate": 85,
    "missing_keywords": ["docker", "kubernetes"],
}
RESUME_DATA = {
    "work_experiences": [{"company": "Acme", "role": "Backend Engineer"}],
    "skills": ["python", "docker", "kubernetes"],
}
DOWNLOAD_URL = "https://files.example.com/resume.pdf"


def settings(is_paid: bool = False, attempts: int = 5) -> Settings:
    return Settings(
        api_base_url=BASE_URL,
        api_timeout=5,
        poll_max_attempts=attempts,
        poll_interval=0,
        user_email=EMAIL,
        user_is_paid=is_paid,
    )


def status_url(task_id: str) -> httpx.URL:
    return httpx.URL(f"{BASE_URL}/check-status", params={"task_id": task_id})


def result_url(task_id: str) -> httpx.URL:
    return httpx.URL(f"{BASE_URL}/get_result", params={"task_id": task_id})


def user_url(path: str) -> httpx.URL:
    return httpx.URL(f"{BASE_URL}/userDetails/{path}", params={"email": EMAIL})


def add_status(httpx_mock: HTTPXMock, task_id: str, *statuses: str) -> None:
    for status in statuses:
        httpx_mock.add_response(method="GET", url=status_url(task_id), json=status)


def add_document_responses(httpx_mock: HTTPXMock) -> None:
    add_status(httpx_mock, "B1", "PENDING", "SUCCESS")
    httpx_mock.add_response(method="GET", url=result_url("B1"), json=RESUME_DATA)
    httpx_mock.add_response(
        method="GET",
        url=user_url("details"),
        json={"name": "Ada Lovelace", "email": EMAIL, "phone_number": "555-0100"},
    )
    httpx_mock.add_response(
        method="POST",
        url=f"{BASE_URL}/generate-resume",
        match_json={
            "basic_details": {"name": "Ada Lovelace", "email": EMAIL, "phone": "555-0100"},
            "resume_data": RESUME_DATA,
        },
        json={"pdf": {"download_url": DOWNLOAD_URL}},
    )


@pytest.fixture
def resume():
    return ResumeFile(filename="cv.pdf", content=b"%PDF-1.4 resume")


class TestJobDescriptionFlow:
    """Job description flow end to end."""

    def test_fresh_upload_unpaid(self, httpx_mock: HTTPXMock, resume):
        """Upload, match, build through the gate, then generate the document."""
        engine, _ = build_components(settings())

        httpx_mock.add_response(
            method="POST", url=f"{BASE_URL}/upload_file/", json={"task_id": "T1"}
        )
        add_status(httpx_mock, "T1", "PENDING", "SUCCESS")
        httpx_mock.add_response(
            method="POST",
            url=f"{BASE_URL}/job_desc",
            match_json={"task_id": "T1", "job_description": "Senior Python developer"},
            json={"match_score_task_id": "M1"},
        )
        add_status(httpx_mock, "M1", "PENDING", "PENDING", "SUCCESS")
        httpx_mock.add_response(method="GET", url=result_url("M1"), json=MATCH_SCORE)
        httpx_mock.add_response(
            method="POST",
            url=f"{BASE_URL}/final_builder",
            match_json={"task_id": "T1", "missing_keywords": ["docker", "kubernetes", "fastapi"]},
            json={"task_id": "B1"},
        )
        add_document_responses(httpx_mock)

        assert engine.submit_job_description("Senior Python developer", resume)
        assert engine.stage is Stage.KEYWORD_SELECTION

        assert engine.load_match_score()
        assert engine.state.selected_keywords == ["docker", "kubernetes"]
        assert engine.add_custom_keyword("fastapi")

        assert engine.submit_keyword_selection()
        assert engine.stage is Stage.UPGRADE_GATE

        assert engine.continue_with_watermark()
        assert engine.build_document()

        assert engine.stage is Stage.DOCUMENT
        assert engine.state.download_url == DOWNLOAD_URL
        assert engine.state.watermarked
        assert engine.error is None

    def test_existing_resume_paid(self, httpx_mock: HTTPXMock):
        """Paid users with a stored resume go from stage 2 straight to 3."""
        engine, _ = build_components(settings(is_paid=True))
        engine.update_session(settings(is_paid=True).session(has_existing_resume=True))

        httpx_mock.add_response(
            method="POST",
            url=f"{BASE_URL}/job_desc",
            match_json={"email": EMAIL, "job_description": "Data engineer"},
            json={"match_score_task_id": "M1"},
        )
        add_status(httpx_mock, "M1", "SUCCESS")
        httpx_mock.add_response(method="GET", url=result_url("M1"), json=MATCH_SCORE)
        httpx_mock.add_response(
            method="POST",
            url=f"{BASE_URL}/final_builder",
            match_json={"email": EMAIL, "missing_keywords": ["docker", "kubernetes"]},
            json={"task_id": "B1"},
        )
        add_document_responses(httpx_mock)

        assert engine.submit_job_description("Data engineer", use_existing=True)
        assert engine.load_match_score()
        assert engine.submit_keyword_selection()
        assert engine.stage is Stage.DOCUMENT

        assert engine.build_document()
        assert engine.state.download_url == DOWNLOAD_URL
        assert not engine.state.watermarked

    def test_match_score_poll_timeout(self, httpx_mock: HTTPXMock, resume):
        """A task that never finishes surfaces the timeout and allows going back."""
        engine, _ = build_components(settings(attempts=3))

        httpx_mock.add_response(
            method="POST", url=f"{BASE_URL}/upload_file/", json={"task_id": "T1"}
        )
        add_status(httpx_mock, "T1", "SUCCESS")
        httpx_mock.add_response(
            method="POST", url=f"{BASE_URL}/job_desc", json={"match_score_task_id": "M1"}
        )
        add_status(httpx_mock, "M1", "PENDING", "PENDING", "PENDING")

        assert engine.submit_job_description("Senior Python developer", resume)
        assert not engine.load_match_score()

        assert engine.error == (
            "Processing is taking too long: task M1 still pending after 3 attempts"
        )
        assert engine.stage is Stage.KEYWORD_SELECTION
        assert engine.snapshot().can_go_back
        assert engine.go_back()
        assert engine.stage is Stage.RESUME_SOURCE

    def test_rejected_resume_data(self, httpx_mock: HTTPXMock):
        """A 4xx on the build result is shown as an actionable message."""
        engine, _ = build_components(settings(is_paid=True))
        engine.update_session(settings(is_paid=True).session(has_existing_resume=True))
        engine.select_flow(FlowVariant.DIRECT_KEYWORDS)

        httpx_mock.add_response(
            method="POST", url=f"{BASE_URL}/final_builder", json={"task_id": "B1"}
        )
        add_status(httpx_mock, "B1", "SUCCESS")
        httpx_mock.add_response(
            method="GET",
            url=result_url("B1"),
            status_code=422,
            json={"detail": "work experience dates are invalid"},
        )

        assert engine.submit_direct_keywords("docker, kubernetes", use_existing=True)
        assert engine.stage is Stage.DOCUMENT
        assert not engine.build_document()

        assert "work experience dates are invalid" in engine.error
        assert engine.state.download_url is None


class TestDirectKeywordsFlow:
    """Direct keywords flow end to end."""

    def test_fresh_upload_unpaid(self, httpx_mock: HTTPXMock, resume):
        """Keywords skip match scoring; the gate still applies."""
        engine, _ = build_components(settings())
        assert engine.select_flow(FlowVariant.DIRECT_KEYWORDS)

        httpx_mock.add_response(
            method="POST", url=f"{BASE_URL}/upload_file/", json={"task_id": "T1"}
        )
        add_status(httpx_mock, "T1", "SUCCESS")
        httpx_mock.add_response(
            method="POST",
            url=f"{BASE_URL}/final_builder",
            match_json={"task_id": "T1", "missing_keywords": ["docker", "kubernetes"]},
            json={"task_id": "B1"},
        )
        add_document_responses(httpx_mock)

        assert engine.submit_direct_keywords("docker, , kubernetes", resume)
        assert engine.stage is Stage.UPGRADE_GATE
        assert engine.choose_upgrade()
        assert engine.build_document()

        assert engine.state.upgrade_requested
        assert engine.state.download_url == DOWNLOAD_URL


class TestProfileBootstrapFlow:
    """Profile bootstrap end to end."""

    def test_missing_profile_is_collected(self, httpx_mock: HTTPXMock, resume):
        """A user without master data fills the form and gets it stored."""
        _, bootstrap = build_components(settings())

        httpx_mock.add_response(method="GET", url=user_url("Master-data"), status_code=404)
        httpx_mock.add_response(
            method="GET",
            url=user_url("details"),
            json={"name": "Ada Lovelace", "email": EMAIL, "phone_number": "555-0100"},
        )
        httpx_mock.add_response(
            method="PUT",
            url=user_url("Master-Edu"),
            match_json={
                "Education": [
                    {
                        "institution": "UCL",
                        "location": "London",
                        "degree": "BSc Mathematics",
                        "startDate": "2010-09",
                        "endDate": "",
                    }
                ],
                "Certifications": [],
            },
            json={"ok": True},
        )
        httpx_mock.add_response(
            method="POST", url=f"{BASE_URL}/upload_file/", json={"task_id": "T1"}
        )
        add_status(httpx_mock, "T1", "SUCCESS")
        httpx_mock.add_response(method="GET", url=result_url("T1"), json=RESUME_DATA)
        httpx_mock.add_response(
            method="PUT", url=user_url("Master-data"), match_json=RESUME_DATA, json={"status": True}
        )

        assert not bootstrap.check()
        assert bootstrap.form_open
        assert bootstrap.prefill.name == "Ada Lovelace"

        form = ProfileForm(
            name=bootstrap.prefill.name,
            email=EMAIL,
            phone=bootstrap.prefill.phone,
            educations=[
                Education(
                    institution="UCL",
                    location="London",
                    degree="BSc Mathematics",
                    start_date="2010-09",
                )
            ],
            resume=resume,
        )

        assert bootstrap.submit(form)
        assert not bootstrap.form_open
        assert bootstrap.has_profile
