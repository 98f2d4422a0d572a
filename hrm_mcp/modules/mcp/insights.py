"""HYPER insights: automated HR analytics computed from the HRM store."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any, Callable

from loguru import logger
from sqlalchemy import func, or_, select
from sqlalchemy.orm import selectinload, sessionmaker

from ..hrm.db import (
    Attendance,
    Candidate,
    Department,
    Employee,
    Interview,
    JobOpening,
    LeaveApplication,
    session_scope,
)
from .arguments import InsightFilters

REQUIRED_DOCUMENTS = (
    "Resume/CV",
    "ID Card/Passport",
    "Educational Certificates",
    "Experience Letters",
    "Bank Account Details",
)
ONBOARDING_CHECKLIST_SIZE = 5
MIN_ONBOARDING_DOCUMENTS = 3
DEFAULT_ONBOARDING_DAYS = 30
DEFAULT_PATTERN_WINDOW_DAYS = 30
MIN_ABSENCES = 3
FREQUENT_ABSENCE_RATIO = 0.3
WORKDAY_START = time(9, 0)
MAX_INSIGHT_ROWS = 50


def _days_since(moment: date | datetime | None, today: date) -> int:
    if moment is None:
        return 0
    if isinstance(moment, datetime):
        moment = moment.date()
    return (today - moment).days


class HyperInsights:
    """
    Read-only analytics over employees, attendance and recruitment.

    Every insight returns ``{"insightType", "data", "meta"}`` where ``meta``
    carries the number of rows and a readable message.
    """

    def __init__(self, session_factory: sessionmaker, today: Callable[[], date] = date.today):
        self.session_factory = session_factory
        self._today = today

    def get(self, insight_type: str, filters: InsightFilters | None = None) -> dict[str, Any]:
        filters = filters or InsightFilters()
        handlers = {
            "missing_documents": self.missing_documents,
            "incomplete_onboarding": self.incomplete_onboarding,
            "attendance_summary": self.attendance_summary,
            "absentee_patterns": self.absentee_patterns,
            "recruitment_pipeline": self.recruitment_pipeline,
            "pending_feedback": self.pending_feedback,
            "quick_stats": self.quick_stats,
        }
        handler = handlers.get(insight_type)
        if handler is None:
            raise ValueError(f"Unknown insight type: {insight_type}")

        logger.info(f"Computing HYPER insight {insight_type}")
        data, message = handler(filters)
        total = len(data) if isinstance(data, list) else 1
        return {"insightType": insight_type, "data": data, "meta": {"total": total, "message": message}}

    def _employee_query(self, filters: InsightFilters):
        stmt = select(Employee).options(
            selectinload(Employee.department),
            selectinload(Employee.documents),
            selectinload(Employee.salary_structures),
        )
        if filters.department_id:
            stmt = stmt.where(Employee.department_id == filters.department_id)
        return stmt

    def missing_documents(self, filters: InsightFilters) -> tuple[list[dict[str, Any]], str]:
        today = self._today()
        rows = []
        with session_scope(self.session_factory) as session:
            stmt = self._employee_query(filters).where(Employee.status == "active")
            for employee in session.scalars(stmt.limit(MAX_INSIGHT_ROWS)):
                existing = {doc.document_type for doc in employee.documents}
                missing = [doc for doc in REQUIRED_DOCUMENTS if doc not in existing]
                if not missing:
                    continue
                rows.append(
                    {
                        "employeeId": employee.employee_id,
                        "employeeName": employee.full_name,
                        "department": employee.department.department_name if employee.department else "N/A",
                        "missingDocuments": missing,
                        "daysOverdue": _days_since(employee.employment_start_date, today),
                    }
                )
        return rows, f"Found {len(rows)} employees with missing documents"

    def incomplete_onboarding(self, filters: InsightFilters) -> tuple[list[dict[str, Any]], str]:
        today = self._today()
        threshold = today - timedelta(days=filters.days or DEFAULT_ONBOARDING_DAYS)
        rows = []
        with session_scope(self.session_factory) as session:
            stmt = self._employee_query(filters).where(
                Employee.employment_start_date >= threshold
            )
            for employee in session.scalars(stmt.limit(MAX_INSIGHT_ROWS)):
                pending = []
                if len(employee.documents) < MIN_ONBOARDING_DOCUMENTS:
                    pending.append("Upload required documents")
                if not employee.salary_structures:
                    pending.append("Configure salary structure")
                if not employee.user_id:
                    pending.append("Create user account")
                if not employee.email or not employee.phone_number:
                    pending.append("Complete personal information")
                if not employee.reporting_manager_id:
                    pending.append("Assign reporting manager")
                if not pending:
                    continue

                completed = ONBOARDING_CHECKLIST_SIZE - len(pending)
                rows.append(
                    {
                        "employeeId": employee.employee_id,
                        "employeeName": employee.full_name,
                        "joinDate": employee.employment_start_date,
                        "daysDelayed": _days_since(employee.employment_start_date, today),
                        "completionPercentage": round(completed / ONBOARDING_CHECKLIST_SIZE * 100),
                        "pendingItems": pending,
                    }
                )
        return rows, f"Found {len(rows)} employees with incomplete onboarding"

    def attendance_summary(self, filters: InsightFilters) -> tuple[dict[str, Any], str]:
        target = filters.on_date or self._today()
        with session_scope(self.session_factory) as session:
            employee_stmt = select(Employee).options(selectinload(Employee.department)).where(
                Employee.status == "active"
            )
            if filters.department_id:
                employee_stmt = employee_stmt.where(Employee.department_id == filters.department_id)
            employees = list(session.scalars(employee_stmt))
            employee_ids = {employee.employee_id for employee in employees}

            attendances = [
                record
                for record in session.scalars(
                    select(Attendance).where(Attendance.attendance_date == target)
                )
                if record.employee_id in employee_ids
            ]
            on_leave = session.scalar(
                select(func.count(LeaveApplication.leave_application_id)).where(
                    LeaveApplication.status == "approved",
                    LeaveApplication.start_date <= target,
                    LeaveApplication.end_date >= target,
                    LeaveApplication.employee_id.in_(list(employee_ids)),
                )
            ) or 0

            checked_in = [record for record in attendances if record.check_in_time is not None]
            present = len(checked_in)
            late = sum(1 for record in checked_in if record.check_in_time.time() > WORKDAY_START)
            total = len(employees)

            departments: dict[str, dict[str, int]] = {}
            department_of = {}
            for employee in employees:
                name = employee.department.department_name if employee.department else "Unknown"
                department_of[employee.employee_id] = name
                departments.setdefault(name, {"present": 0, "total": 0})["total"] += 1
            for record in checked_in:
                departments[department_of[record.employee_id]]["present"] += 1

        summary = {
            "date": target.isoformat(),
            "totalEmployees": total,
            "present": present,
            "absent": max(total - present - on_leave, 0),
            "late": late,
            "onLeave": on_leave,
            "attendancePercentage": round(present / total * 100, 2) if total else 0.0,
            "departments": [
                {
                    "departmentName": name,
                    "present": stats["present"],
                    "total": stats["total"],
                    "percentage": round(stats["present"] / stats["total"] * 100, 2) if stats["total"] else 0.0,
                }
                for name, stats in sorted(departments.items())
            ],
        }
        return summary, f"Attendance summary for {target.isoformat()}"

    def absentee_patterns(self, filters: InsightFilters) -> tuple[list[dict[str, Any]], str]:
        end = filters.end_date or self._today()
        start = filters.start_date or end - timedelta(days=DEFAULT_PATTERN_WINDOW_DAYS)
        # five working days per week
        working_days = int((end - start).days / 7 * 5)

        rows = []
        with session_scope(self.session_factory) as session:
            present_counts = dict(
                session.execute(
                    select(Attendance.employee_id, func.count(Attendance.attendance_id))
                    .where(
                        Attendance.attendance_date.between(start, end),
                        Attendance.check_in_time.is_not(None),
                    )
                    .group_by(Attendance.employee_id)
                ).all()
            )
            stmt = select(Employee).options(selectinload(Employee.department)).where(
                Employee.status == "active"
            )
            if filters.department_id:
                stmt = stmt.where(Employee.department_id == filters.department_id)

            for employee in session.scalars(stmt):
                absences = working_days - present_counts.get(employee.employee_id, 0)
                if absences < MIN_ABSENCES:
                    continue
                rows.append(
                    {
                        "employeeId": employee.employee_id,
                        "employeeName": employee.full_name,
                        "department": employee.department.department_name if employee.department else "N/A",
                        "totalAbsences": absences,
                        "workingDays": working_days,
                        "pattern": "frequent" if absences > working_days * FREQUENT_ABSENCE_RATIO else "irregular",
                    }
                )
        rows.sort(key=lambda row: row["totalAbsences"], reverse=True)
        return rows[:MAX_INSIGHT_ROWS], f"Found {len(rows)} employees with absentee patterns"

    def recruitment_pipeline(self, filters: InsightFilters) -> tuple[list[dict[str, Any]], str]:
        today = self._today()
        week_ago = today - timedelta(days=7)
        rows = []
        with session_scope(self.session_factory) as session:
            stmt = (
                select(JobOpening)
                .options(
                    selectinload(JobOpening.candidates),
                    selectinload(JobOpening.department),
                    selectinload(JobOpening.designation),
                )
                .where(JobOpening.status == "open")
            )
            if filters.department_id:
                stmt = stmt.where(JobOpening.department_id == filters.department_id)

            for job in session.scalars(stmt.limit(MAX_INSIGHT_ROWS)):
                statuses = [candidate.current_status for candidate in job.candidates]
                rows.append(
                    {
                        "jobOpeningId": job.job_opening_id,
                        "jobTitle": job.title,
                        "department": job.department.department_name if job.department else "N/A",
                        "totalApplicants": len(statuses),
                        "newApplications": sum(
                            1
                            for candidate in job.candidates
                            if candidate.created_at and candidate.created_at.date() >= week_ago
                        ),
                        "shortlisted": sum(s in ("Screening", "Phone Screen") for s in statuses),
                        "interviewing": sum(s in ("Interview", "Technical Test") for s in statuses),
                        "hired": statuses.count("Hired"),
                        "rejected": statuses.count("Rejected"),
                        "daysOpen": _days_since(job.published_at or job.created_at, today),
                    }
                )
        return rows, f"Pipeline summary for {len(rows)} open positions"

    def pending_feedback(self, filters: InsightFilters) -> tuple[list[dict[str, Any]], str]:
        today = self._today()
        cutoff = datetime.combine(today, time.min)
        rows = []
        with session_scope(self.session_factory) as session:
            stmt = (
                select(Interview)
                .options(
                    selectinload(Interview.candidate),
                    selectinload(Interview.job_opening),
                    selectinload(Interview.interviewer),
                )
                .where(
                    or_(Interview.feedback.is_(None), Interview.feedback == ""),
                    Interview.interview_date < cutoff,
                )
                .order_by(Interview.interview_date)
                .limit(MAX_INSIGHT_ROWS)
            )
            for interview in session.scalars(stmt):
                rows.append(
                    {
                        "interviewId": interview.interview_id,
                        "candidateName": (
                            f"{interview.candidate.first_name} {interview.candidate.last_name}"
                            if interview.candidate
                            else ""
                        ),
                        "jobTitle": interview.job_opening.title if interview.job_opening else "N/A",
                        "interviewerName": interview.interviewer.full_name if interview.interviewer else "",
                        "interviewDate": interview.interview_date,
                        "daysPending": _days_since(interview.interview_date, today),
                    }
                )
        return rows, f"Found {len(rows)} interviews pending feedback"

    def quick_stats(self, filters: InsightFilters) -> tuple[dict[str, Any], str]:
        today = self._today()
        month_start = today.replace(day=1)
        with session_scope(self.session_factory) as session:
            total_employees = session.scalar(
                select(func.count(Employee.employee_id)).where(Employee.status == "active")
            ) or 0
            on_leave_today = session.scalar(
                select(func.count(LeaveApplication.leave_application_id)).where(
                    LeaveApplication.status == "approved",
                    LeaveApplication.start_date <= today,
                    LeaveApplication.end_date >= today,
                )
            ) or 0
            new_hires = session.scalar(
                select(func.count(Employee.employee_id)).where(
                    Employee.employment_start_date >= month_start
                )
            ) or 0
            open_positions = session.scalar(
                select(func.count(JobOpening.job_opening_id)).where(JobOpening.status == "open")
            ) or 0
            total_candidates = session.scalar(select(func.count(Candidate.candidate_id))) or 0
            pending_leaves = session.scalar(
                select(func.count(LeaveApplication.leave_application_id)).where(
                    LeaveApplication.status == "pending"
                )
            ) or 0
            present_today = session.scalar(
                select(func.count(Attendance.attendance_id)).where(
                    Attendance.attendance_date == today,
                    Attendance.check_in_time.is_not(None),
                )
            ) or 0
            departments = session.scalar(select(func.count(Department.department_id))) or 0

        stats = {
            "totalEmployees": total_employees,
            "totalDepartments": departments,
            "onLeaveToday": on_leave_today,
            "newHiresThisMonth": new_hires,
            "openPositions": open_positions,
            "totalCandidates": total_candidates,
            "pendingLeaveApprovals": pending_leaves,
            "presentToday": present_today,
            "attendanceRate": round(present_today / total_employees * 100, 2) if total_employees else 0.0,
        }
        return stats, f"Quick stats for {today.isoformat()}"
