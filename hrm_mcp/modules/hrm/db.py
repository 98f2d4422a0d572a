"""SQLAlchemy models for the HRM tables the MCP tools read and write."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator

from loguru import logger
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class SerializableMixin:
    def to_dict(self) -> dict[str, Any]:
        return {column.key: getattr(self, column.key) for column in self.__table__.columns}


class TimestampMixin:
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Department(SerializableMixin, TimestampMixin, Base):
    __tablename__ = "departments"

    department_id = Column(String(36), primary_key=True, default=_uuid)
    department_name = Column(String(120), nullable=False, unique=True)

    employees = relationship("Employee", back_populates="department")


class Designation(SerializableMixin, TimestampMixin, Base):
    __tablename__ = "designations"

    designation_id = Column(String(36), primary_key=True, default=_uuid)
    designation_name = Column(String(120), nullable=False)


class Location(SerializableMixin, TimestampMixin, Base):
    __tablename__ = "locations"

    location_id = Column(String(36), primary_key=True, default=_uuid)
    location_name = Column(String(120), nullable=False)


class Employee(SerializableMixin, TimestampMixin, Base):
    __tablename__ = "employees"

    employee_id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=True)
    employee_unique_id = Column(String(32), nullable=True, unique=True)
    first_name = Column(String(80), nullable=False)
    last_name = Column(String(80), nullable=False)
    email = Column(String(160), nullable=True, unique=True, index=True)
    phone_number = Column(String(32), nullable=True)
    employment_start_date = Column(Date, nullable=True)
    employment_end_date = Column(Date, nullable=True)
    department_id = Column(String(36), ForeignKey("departments.department_id"), nullable=True)
    designation_id = Column(String(36), ForeignKey("designations.designation_id"), nullable=True)
    location_id = Column(String(36), ForeignKey("locations.location_id"), nullable=True)
    reporting_manager_id = Column(String(36), ForeignKey("employees.employee_id"), nullable=True)
    status = Column(String(20), nullable=False, default="active")

    department = relationship("Department", back_populates="employees")
    designation = relationship("Designation")
    location = relationship("Location")
    documents = relationship("EmployeeDocument", back_populates="employee")
    salary_structures = relationship("SalaryStructure", back_populates="employee")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Attendance(SerializableMixin, TimestampMixin, Base):
    __tablename__ = "attendances"

    attendance_id = Column(String(36), primary_key=True, default=_uuid)
    employee_id = Column(String(36), ForeignKey("employees.employee_id"), nullable=False, index=True)
    attendance_date = Column(Date, nullable=False, index=True)
    check_in_time = Column(DateTime, nullable=True)
    check_out_time = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False, default="present")
    total_hour = Column(Float, nullable=True)

    employee = relationship("Employee")


class LeaveType(SerializableMixin, TimestampMixin, Base):
    __tablename__ = "leave_types"

    leave_type_id = Column(String(36), primary_key=True, default=_uuid)
    type_name = Column(String(80), nullable=False)
    max_days_per_year = Column(Integer, nullable=True)
    is_paid = Column(Boolean, nullable=False, default=True)


class LeaveApplication(SerializableMixin, TimestampMixin, Base):
    __tablename__ = "leave_applications"

    leave_application_id = Column(String(36), primary_key=True, default=_uuid)
    employee_id = Column(String(36), ForeignKey("employees.employee_id"), nullable=False, index=True)
    leave_type_id = Column(String(36), ForeignKey("leave_types.leave_type_id"), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    number_of_day = Column(Integer, nullable=False, default=1)
    reason = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    applied_by = Column(String(80), nullable=True)

    employee = relationship("Employee")
    leave_type = relationship("LeaveType")


class JobOpening(SerializableMixin, TimestampMixin, Base):
    __tablename__ = "job_openings"

    job_opening_id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(160), nullable=False)
    description = Column(Text, nullable=True)
    department_id = Column(String(36), ForeignKey("departments.department_id"), nullable=True)
    designation_id = Column(String(36), ForeignKey("designations.designation_id"), nullable=True)
    required_experience = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default="open")
    published_at = Column(DateTime, nullable=True)
    closed_at = Column(DateTime, nullable=True)

    department = relationship("Department")
    designation = relationship("Designation")
    candidates = relationship("Candidate", back_populates="job_opening")


class Candidate(SerializableMixin, TimestampMixin, Base):
    __tablename__ = "candidates"

    candidate_id = Column(String(36), primary_key=True, default=_uuid)
    first_name = Column(String(80), nullable=False)
    last_name = Column(String(80), nullable=False)
    email = Column(String(160), nullable=True)
    phone_number = Column(String(32), nullable=True)
    resume_text = Column(Text, nullable=True)
    source = Column(String(60), nullable=True)
    current_status = Column(String(40), nullable=False, default="Applied")
    job_opening_id = Column(String(36), ForeignKey("job_openings.job_opening_id"), nullable=True)
    referred_by_employee_id = Column(String(36), ForeignKey("employees.employee_id"), nullable=True)

    job_opening = relationship("JobOpening", back_populates="candidates")


class Interview(SerializableMixin, TimestampMixin, Base):
    __tablename__ = "interviews"

    interview_id = Column(String(36), primary_key=True, default=_uuid)
    candidate_id = Column(String(36), ForeignKey("candidates.candidate_id"), nullable=False)
    job_opening_id = Column(String(36), ForeignKey("job_openings.job_opening_id"), nullable=True)
    interviewer_id = Column(String(36), ForeignKey("employees.employee_id"), nullable=True)
    interview_date = Column(DateTime, nullable=False)
    feedback = Column(Text, nullable=True)
    rating = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default="scheduled")

    candidate = relationship("Candidate")
    job_opening = relationship("JobOpening")
    interviewer = relationship("Employee")


class PerformanceReview(SerializableMixin, TimestampMixin, Base):
    __tablename__ = "performance_reviews"

    performance_review_id = Column(String(36), primary_key=True, default=_uuid)
    employee_id = Column(String(36), ForeignKey("employees.employee_id"), nullable=False, index=True)
    reviewer_id = Column(String(36), ForeignKey("employees.employee_id"), nullable=True)
    review_period = Column(String(40), nullable=False)
    review_date = Column(Date, nullable=True)
    self_assessment = Column(Text, nullable=True)
    manager_feedback = Column(Text, nullable=True)
    overall_rating = Column(Float, nullable=True)
    recommendation = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="draft")

    employee = relationship("Employee", foreign_keys=[employee_id])


class Goal(SerializableMixin, TimestampMixin, Base):
    __tablename__ = "goals"

    goal_id = Column(String(36), primary_key=True, default=_uuid)
    employee_id = Column(String(36), ForeignKey("employees.employee_id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    kpi = Column(String(120), nullable=True)
    period = Column(String(40), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="not_started")

    employee = relationship("Employee")


class EmployeeDocument(SerializableMixin, TimestampMixin, Base):
    __tablename__ = "documents"

    document_id = Column(String(36), primary_key=True, default=_uuid)
    employee_id = Column(String(36), ForeignKey("employees.employee_id"), nullable=False, index=True)
    document_type = Column(String(80), nullable=False)
    file_name = Column(String(200), nullable=True)
    file_url = Column(String(400), nullable=True)

    employee = relationship("Employee", back_populates="documents")


class SalaryStructure(SerializableMixin, TimestampMixin, Base):
    __tablename__ = "salary_structures"

    salary_structure_id = Column(String(36), primary_key=True, default=_uuid)
    employee_id = Column(String(36), ForeignKey("employees.employee_id"), nullable=False, index=True)
    base_salary = Column(Numeric(12, 2), nullable=False)
    allowances = Column(Numeric(12, 2), nullable=True)
    gross_salary = Column(Numeric(12, 2), nullable=True)
    effective_from = Column(Date, nullable=True)

    employee = relationship("Employee", back_populates="salary_structures")


class Competency(SerializableMixin, TimestampMixin, Base):
    __tablename__ = "competencies"

    competency_id = Column(String(36), primary_key=True, default=_uuid)
    competency_name = Column(String(120), nullable=False)


class EmployeeCompetency(SerializableMixin, TimestampMixin, Base):
    __tablename__ = "employee_competencies"

    employee_competency_id = Column(String(36), primary_key=True, default=_uuid)
    employee_id = Column(String(36), ForeignKey("employees.employee_id"), nullable=False)
    competency_id = Column(String(36), ForeignKey("competencies.competency_id"), nullable=False)
    proficiency_level = Column(String(40), nullable=True)
    years_of_experience = Column(Float, nullable=True)


def build_engine(url: str, pool_size: int = 5) -> Engine:
    if url.startswith("sqlite"):
        return create_engine(url, future=True)
    return create_engine(url, future=True, pool_size=pool_size, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False, future=True)


def init_db(engine: Engine) -> None:
    """Create missing tables (development and tests; production uses migrations)."""
    Base.metadata.create_all(engine)
    logger.info(f"HRM tables ensured on {engine.url.render_as_string(hide_password=True)}")


@contextmanager
def session_scope(factory: sessionmaker) -> Iterator[Session]:
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:  # noqa: BLE001
        session.rollback()
        raise
    finally:
        session.close()

