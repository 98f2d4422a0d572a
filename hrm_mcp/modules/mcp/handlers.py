"""Fixed HRM queries behind the entity tools."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Callable

from loguru import logger
from sqlalchemy import func, or_, select
from sqlalchemy.orm import selectinload, sessionmaker

from ..hrm.db import (
    Attendance,
    Candidate,
    Department,
    Employee,
    Goal,
    JobOpening,
    LeaveApplication,
    PerformanceReview,
    session_scope,
)
from .arguments import (
    AttendanceSummaryArgs,
    CandidatesArgs,
    CreateLeaveRequestArgs,
    DepartmentEmployeesArgs,
    DepartmentsArgs,
    EmployeeGoalsArgs,
    EmployeeInfoArgs,
    JobOpeningsArgs,
    LeaveRequestsArgs,
    PerformanceReviewsArgs,
    SearchEmployeesArgs,
)
from .errors import HandlerFailure

RECENT_ATTENDANCE_DAYS = 30


def _employee_dict(employee: Employee) -> dict[str, Any]:
    data = employee.to_dict()
    data["fullName"] = employee.full_name
    data["department"] = employee.department.department_name if employee.department else None
    data["designation"] = employee.designation.designation_name if employee.designation else None
    data["location"] = employee.location.location_name if employee.location else None
    return data


def _employee_options():
    return (
        selectinload(Employee.department),
        selectinload(Employee.designation),
        selectinload(Employee.location),
    )


class HRMHandlers:
    """One method per entity tool; each returns a JSON-ready dict."""

    def __init__(self, session_factory: sessionmaker, today: Callable[[], date] = date.today):
        self.session_factory = session_factory
        self._today = today

    def get_employee_info(self, args: EmployeeInfoArgs) -> dict[str, Any]:
        with session_scope(self.session_factory) as session:
            stmt = select(Employee).options(*_employee_options())
            if "@" in args.identifier:
                stmt = stmt.where(Employee.email == args.identifier)
            else:
                stmt = stmt.where(Employee.employee_id == args.identifier)
            employee = session.scalars(stmt).first()
            if employee is None:
                raise HandlerFailure(f"Employee not found: {args.identifier}")

            attendance = None
            if args.include_attendance:
                since = self._today() - timedelta(days=RECENT_ATTENDANCE_DAYS)
                records = session.scalars(
                    select(Attendance)
                    .where(
                        Attendance.employee_id == employee.employee_id,
                        Attendance.attendance_date >= since,
                    )
                    .order_by(Attendance.attendance_date.desc())
                    .limit(RECENT_ATTENDANCE_DAYS)
                ).all()
                attendance = [record.to_dict() for record in records]

            return {"employee": _employee_dict(employee), "attendance": attendance}

    def get_department_employees(self, args: DepartmentEmployeesArgs) -> dict[str, Any]:
        with session_scope(self.session_factory) as session:
            stmt = (
                select(Employee)
                .options(*_employee_options())
                .where(Employee.department_id == args.department_id)
                .order_by(Employee.first_name)
            )
            if not args.include_inactive:
                stmt = stmt.where(Employee.status == "active")
            employees = [_employee_dict(employee) for employee in session.scalars(stmt)]
        return {"departmentId": args.department_id, "count": len(employees), "employees": employees}

    def search_employees(self, args: SearchEmployeesArgs) -> dict[str, Any]:
        pattern = f"%{args.query}%"
        with session_scope(self.session_factory) as session:
            stmt = (
                select(Employee)
                .options(*_employee_options())
                .where(
                    or_(
                        Employee.first_name.ilike(pattern),
                        Employee.last_name.ilike(pattern),
                        Employee.email.ilike(pattern),
                    )
                )
                .order_by(Employee.first_name)
                .limit(args.limit)
            )
            filters = args.filters
            if filters.department_id:
                stmt = stmt.where(Employee.department_id == filters.department_id)
            if filters.designation_id:
                stmt = stmt.where(Employee.designation_id == filters.designation_id)
            if filters.location_id:
                stmt = stmt.where(Employee.location_id == filters.location_id)
            employees = [_employee_dict(employee) for employee in session.scalars(stmt)]
        return {"query": args.query, "count": len(employees), "employees": employees}

    def get_attendance_summary(self, args: AttendanceSummaryArgs) -> dict[str, Any]:
        with session_scope(self.session_factory) as session:
            stmt = select(Attendance).where(
                Attendance.attendance_date.between(args.start_date, args.end_date)
            )
            if args.employee_id:
                stmt = stmt.where(Attendance.employee_id == args.employee_id)
            if args.department_id:
                stmt = stmt.join(Employee, Employee.employee_id == Attendance.employee_id).where(
                    Employee.department_id == args.department_id
                )
            records = session.scalars(stmt.order_by(Attendance.attendance_date)).all()

            def count(status: str) -> int:
                return sum(1 for record in records if record.status == status)

            return {
                "startDate": args.start_date,
                "endDate": args.end_date,
                "totalRecords": len(records),
                "present": count("present"),
                "absent": count("absent"),
                "late": count("late"),
                "onLeave": count("on_leave"),
                "records": [record.to_dict() for record in records],
            }

    def get_leave_requests(self, args: LeaveRequestsArgs) -> dict[str, Any]:
        with session_scope(self.session_factory) as session:
            stmt = select(LeaveApplication).options(
                selectinload(LeaveApplication.employee), selectinload(LeaveApplication.leave_type)
            )
            if args.status:
                stmt = stmt.where(LeaveApplication.status == args.status)
            if args.employee_id:
                stmt = stmt.where(LeaveApplication.employee_id == args.employee_id)
            if args.start_date and args.end_date:
                stmt = stmt.where(LeaveApplication.start_date.between(args.start_date, args.end_date))
            stmt = stmt.order_by(LeaveApplication.created_at.desc()).limit(args.limit)

            leave_requests = []
            for leave in session.scalars(stmt):
                data = leave.to_dict()
                data["employeeName"] = leave.employee.full_name if leave.employee else None
                data["leaveType"] = leave.leave_type.type_name if leave.leave_type else None
                leave_requests.append(data)
        return {"count": len(leave_requests), "leaveRequests": leave_requests}

    def get_job_openings(self, args: JobOpeningsArgs) -> dict[str, Any]:
        with session_scope(self.session_factory) as session:
            stmt = select(JobOpening).options(selectinload(JobOpening.department))
            if args.department_id:
                stmt = stmt.where(JobOpening.department_id == args.department_id)
            if args.status:
                stmt = stmt.where(JobOpening.status == args.status)

            openings = []
            for job in session.scalars(stmt.order_by(JobOpening.created_at.desc())):
                data = job.to_dict()
                data["department"] = job.department.department_name if job.department else None
                openings.append(data)

            if args.include_applications and openings:
                counts = dict(
                    session.execute(
                        select(Candidate.job_opening_id, func.count(Candidate.candidate_id))
                        .where(Candidate.job_opening_id.in_([job["job_opening_id"] for job in openings]))
                        .group_by(Candidate.job_opening_id)
                    ).all()
                )
                for job in openings:
                    job["candidateCount"] = counts.get(job["job_opening_id"], 0)
        return {"count": len(openings), "jobOpenings": openings}

    def get_candidates(self, args: CandidatesArgs) -> dict[str, Any]:
        with session_scope(self.session_factory) as session:
            stmt = select(Candidate).options(selectinload(Candidate.job_opening))
            if args.job_opening_id:
                stmt = stmt.where(Candidate.job_opening_id == args.job_opening_id)
            if args.status:
                stmt = stmt.where(func.lower(Candidate.current_status) == args.status.lower())
            for skill in args.skills:
                stmt = stmt.where(Candidate.resume_text.ilike(f"%{skill}%"))
            stmt = stmt.order_by(Candidate.created_at.desc()).limit(args.limit)

            candidates = []
            for candidate in session.scalars(stmt):
                data = candidate.to_dict()
                data["jobTitle"] = candidate.job_opening.title if candidate.job_opening else None
                candidates.append(data)
        return {"count": len(candidates), "candidates": candidates}

    def get_performance_reviews(self, args: PerformanceReviewsArgs) -> dict[str, Any]:
        with session_scope(self.session_factory) as session:
            stmt = select(PerformanceReview).options(selectinload(PerformanceReview.employee))
            if args.employee_id:
                stmt = stmt.where(PerformanceReview.employee_id == args.employee_id)
            if args.review_period:
                stmt = stmt.where(PerformanceReview.review_period == args.review_period)
            if args.status:
                stmt = stmt.where(PerformanceReview.status == args.status)

            reviews = []
            for review in session.scalars(stmt.order_by(PerformanceReview.created_at.desc())):
                data = review.to_dict()
                data["employeeName"] = review.employee.full_name if review.employee else None
                reviews.append(data)
        return {"count": len(reviews), "reviews": reviews}

    def get_departments(self, args: DepartmentsArgs) -> dict[str, Any]:
        with session_scope(self.session_factory) as session:
            departments = [
                department.to_dict()
                for department in session.scalars(select(Department).order_by(Department.department_name))
            ]
            if args.include_employee_count:
                counts = dict(
                    session.execute(
                        select(Employee.department_id, func.count(Employee.employee_id)).group_by(
                            Employee.department_id
                        )
                    ).all()
                )
                for department in departments:
                    department["employeeCount"] = counts.get(department["department_id"], 0)
        return {"count": len(departments), "departments": departments}

    def create_leave_request(self, args: CreateLeaveRequestArgs, principal: str) -> dict[str, Any]:
        with session_scope(self.session_factory) as session:
            if session.get(Employee, args.employee_id) is None:
                raise HandlerFailure(f"Employee not found: {args.employee_id}")

            leave = LeaveApplication(
                employee_id=args.employee_id,
                leave_type_id=args.leave_type_id,
                start_date=args.start_date,
                end_date=args.end_date,
                number_of_day=(args.end_date - args.start_date).days + 1,
                reason=args.reason,
                status="pending",
                applied_by=principal,
            )
            session.add(leave)
            session.flush()
            payload = leave.to_dict()

        # Not idempotent: every call inserts a new row
        logger.info(
            f"Leave request {payload['leave_application_id']} created for employee "
            f"{args.employee_id} by {principal}"
        )
        return {
            "success": True,
            "leaveRequest": payload,
            "message": "Leave request created successfully",
        }

    def get_employee_goals(self, args: EmployeeGoalsArgs) -> dict[str, Any]:
        with session_scope(self.session_factory) as session:
            stmt = select(Goal).where(Goal.employee_id == args.employee_id)
            if args.status == "active":
                stmt = stmt.where(Goal.status.in_(("not_started", "in_progress")))
            elif args.status == "completed":
                stmt = stmt.where(Goal.status == "completed")
            elif args.status == "overdue":
                stmt = stmt.where(Goal.status != "completed", Goal.end_date < self._today())
            goals = [goal.to_dict() for goal in session.scalars(stmt.order_by(Goal.created_at.desc()))]
        return {"employeeId": args.employee_id, "count": len(goals), "goals": goals}
