from datetime import date, datetime, time, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from hrm_mcp.di import build_dispatcher
from hrm_mcp.modules.hrm.db import (
    Attendance,
    Candidate,
    Competency,
    Department,
    Designation,
    Employee,
    EmployeeCompetency,
    EmployeeDocument,
    Goal,
    Interview,
    JobOpening,
    LeaveApplication,
    LeaveType,
    Location,
    PerformanceReview,
    SalaryStructure,
    build_session_factory,
    init_db,
    session_scope,
)
from hrm_mcp.modules.mcp.config import Settings
from hrm_mcp.modules.mcp.insights import REQUIRED_DOCUMENTS
from hrm_mcp.modules.mcp.llm_client import LLMClient
from hrm_mcp.modules.mcp.models import CallerContext
from hrm_mcp.modules.mcp.reports import ClaudeReportGenerator, GeminiReportGenerator

TODAY = date.today()

REPORT_PLAN = """Here is the plan:
{"title": "Workforce Overview",
 "tools": [
   {"name": "get_departments", "arguments": {}},
   {"name": "generate_quick_report", "arguments": {"reportType": "headcount"}},
   {"name": "get_hyper_insights", "arguments": {"insightType": "quick_stats"}}
 ],
 "sections": ["Headcount"],
 "analysisType": "summary"}
"""

REPORT_BODY = """## Executive Summary
Three active employees across two staffed departments.

## Headcount
- Engineering: 2
- Human Resources: 1

## Key Insights
Engineering is the largest team.

## Recommendations
Staff the Finance department.
"""


class ScriptedLLMClient(LLMClient):
    """Returns canned answers in order and records every prompt."""

    def __init__(self, provider, answers):
        super().__init__(api_key="test-key", model="scripted", api_base="http://llm.invalid")
        self.provider = provider
        self.answers = list(answers)
        self.prompts = []

    def complete(self, prompt, *, system=None, max_tokens=4096):
        self.prompts.append(prompt)
        return self.answers.pop(0)


def _at(day, hour, minute=0):
    return datetime.combine(day, time(hour, minute))


def seed(factory):
    with session_scope(factory) as session:
        session.add_all(
            [
                Department(department_id="d-eng", department_name="Engineering"),
                Department(department_id="d-hr", department_name="Human Resources"),
                Department(department_id="d-fin", department_name="Finance"),
                Designation(designation_id="des-dev", designation_name="Software Engineer"),
                Designation(designation_id="des-hr", designation_name="HR Manager"),
                Location(location_id="loc-hq", location_name="Head Office"),
                LeaveType(leave_type_id="lt-annual", type_name="Annual Leave", max_days_per_year=20),
            ]
        )
        session.flush()

        session.add_all(
            [
                Employee(
                    employee_id="e-alice",
                    user_id="u-alice",
                    first_name="Alice",
                    last_name="Smith",
                    email="alice@example.com",
                    phone_number="+1-555-0100",
                    employment_start_date=TODAY - timedelta(days=400),
                    department_id="d-eng",
                    designation_id="des-dev",
                    location_id="loc-hq",
                ),
                Employee(
                    employee_id="e-carol",
                    user_id="u-carol",
                    first_name="Carol",
                    last_name="White",
                    email="carol@example.com",
                    phone_number="+1-555-0102",
                    employment_start_date=TODAY - timedelta(days=200),
                    department_id="d-hr",
                    designation_id="des-hr",
                    location_id="loc-hq",
                    reporting_manager_id="e-alice",
                ),
                Employee(
                    employee_id="e-dave",
                    first_name="Dave",
                    last_name="Brown",
                    email="dave@example.com",
                    employment_start_date=TODAY - timedelta(days=900),
                    department_id="d-eng",
                    status="inactive",
                ),
            ]
        )
        session.flush()
        # New hire with nothing set up yet
        session.add(
            Employee(
                employee_id="e-bob",
                first_name="Bob",
                last_name="Jones",
                email="bob@example.com",
                employment_start_date=TODAY - timedelta(days=10),
                department_id="d-eng",
                designation_id="des-dev",
                reporting_manager_id="e-alice",
            )
        )
        session.flush()

        session.add_all(
            [EmployeeDocument(employee_id="e-alice", document_type=doc) for doc in REQUIRED_DOCUMENTS]
            + [
                EmployeeDocument(employee_id="e-carol", document_type="Resume/CV"),
                EmployeeDocument(employee_id="e-carol", document_type="ID Card/Passport"),
            ]
        )
        session.add_all(
            [
                SalaryStructure(
                    employee_id="e-alice",
                    base_salary=Decimal("5000.00"),
                    allowances=Decimal("500.00"),
                    gross_salary=Decimal("5500.00"),
                ),
                SalaryStructure(
                    employee_id="e-carol",
                    base_salary=Decimal("4000.00"),
                    gross_salary=Decimal("4000.00"),
                ),
            ]
        )
        session.add_all(
            [
                Attendance(
                    employee_id="e-alice",
                    attendance_date=TODAY,
                    check_in_time=_at(TODAY, 8, 50),
                    status="present",
                ),
                Attendance(
                    employee_id="e-carol",
                    attendance_date=TODAY,
                    check_in_time=_at(TODAY, 9, 30),
                    status="late",
                ),
                Attendance(
                    employee_id="e-alice",
                    attendance_date=TODAY - timedelta(days=1),
                    check_in_time=_at(TODAY - timedelta(days=1), 8, 55),
                    check_out_time=_at(TODAY - timedelta(days=1), 17, 0),
                    status="present",
                    total_hour=8.1,
                ),
                Attendance(employee_id="e-bob", attendance_date=TODAY, status="absent"),
            ]
        )
        session.add_all(
            [
                LeaveApplication(
                    leave_application_id="la-carol",
                    employee_id="e-carol",
                    leave_type_id="lt-annual",
                    start_date=TODAY + timedelta(days=5),
                    end_date=TODAY + timedelta(days=6),
                    number_of_day=2,
                    reason="Family trip",
                    status="pending",
                ),
                LeaveApplication(
                    leave_application_id="la-bob",
                    employee_id="e-bob",
                    leave_type_id="lt-annual",
                    start_date=TODAY - timedelta(days=1),
                    end_date=TODAY + timedelta(days=1),
                    number_of_day=3,
                    reason="Moving house",
                    status="approved",
                ),
            ]
        )
        session.add_all(
            [
                JobOpening(
                    job_opening_id="job-backend",
                    title="Backend Engineer",
                    department_id="d-eng",
                    designation_id="des-dev",
                    status="open",
                    published_at=_at(TODAY - timedelta(days=20), 10),
                ),
                JobOpening(
                    job_opening_id="job-recruiter",
                    title="Recruiter",
                    department_id="d-hr",
                    status="closed",
                ),
            ]
        )
        session.flush()
        session.add_all(
            [
                Candidate(
                    candidate_id="c-eve",
                    first_name="Eve",
                    last_name="Adams",
                    resume_text="Python, SQL and PostgreSQL",
                    current_status="Interview",
                    job_opening_id="job-backend",
                ),
                Candidate(
                    candidate_id="c-frank",
                    first_name="Frank",
                    last_name="Moore",
                    resume_text="Java and Kotlin",
                    current_status="Hired",
                    job_opening_id="job-backend",
                ),
                Candidate(
                    candidate_id="c-grace",
                    first_name="Grace",
                    last_name="Lee",
                    resume_text="Go, Python",
                    current_status="Screening",
                    job_opening_id="job-backend",
                ),
            ]
        )
        session.flush()
        session.add_all(
            [
                Interview(
                    interview_id="i-eve",
                    candidate_id="c-eve",
                    job_opening_id="job-backend",
                    interviewer_id="e-alice",
                    interview_date=_at(TODAY - timedelta(days=3), 14),
                ),
                Interview(
                    interview_id="i-frank",
                    candidate_id="c-frank",
                    job_opening_id="job-backend",
                    interviewer_id="e-alice",
                    interview_date=_at(TODAY - timedelta(days=10), 11),
                    feedback="Strong hire",
                    rating=5,
                    status="completed",
                ),
                PerformanceReview(
                    performance_review_id="pr-alice",
                    employee_id="e-alice",
                    reviewer_id="e-carol",
                    review_period="Q1 2025",
                    overall_rating=4.5,
                    status="completed",
                ),
                Goal(
                    goal_id="g-ship",
                    employee_id="e-alice",
                    title="Ship v2",
                    end_date=TODAY + timedelta(days=30),
                    status="in_progress",
                ),
                Goal(
                    goal_id="g-docs",
                    employee_id="e-alice",
                    title="Write onboarding docs",
                    end_date=TODAY - timedelta(days=5),
                    status="not_started",
                ),
                Goal(
                    goal_id="g-mentor",
                    employee_id="e-alice",
                    title="Mentor a new hire",
                    end_date=TODAY - timedelta(days=40),
                    status="completed",
                ),
                Competency(competency_id="comp-python", competency_name="Python"),
            ]
        )
        session.flush()
        session.add(
            EmployeeCompetency(
                employee_id="e-alice",
                competency_id="comp-python",
                proficiency_level="expert",
                years_of_experience=8,
            )
        )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    init_db(engine)
    seed(build_session_factory(engine))
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def settings():
    return Settings(_env_file=None, default_ai_provider="claude")


@pytest.fixture
def report_generators():
    return {
        "claude": ClaudeReportGenerator(ScriptedLLMClient("claude", [REPORT_PLAN, REPORT_BODY])),
        "gemini": GeminiReportGenerator(ScriptedLLMClient("gemini", [REPORT_PLAN, REPORT_BODY])),
    }


@pytest.fixture
def dispatcher(engine, settings, session_factory, report_generators):
    return build_dispatcher(
        engine,
        settings,
        session_factory=session_factory,
        report_generators=report_generators,
    )


@pytest.fixture
def context():
    return CallerContext(source="cli", principal="tester", roles=("hr",))
