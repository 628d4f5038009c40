"""End-of-day reports filed by employees against their projects."""
import logging
from datetime import datetime, timezone
from typing import Callable, List

from .schema import EODReport, Role
from .session import PermissionDenied, Session
from .store import EntityStore

logger = logging.getLogger(__name__)


class ReportBook:
    """Submits and lists EOD reports."""

    def __init__(self, store: EntityStore, clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self.store = store
        self.clock = clock

    def submit(self, session: Session, project_id: str, content: str) -> EODReport:
        """
        File a report for today.

        Only employees file reports, and only for projects where they
        have at least one assigned task.
        """
        if session.role != Role.EMPLOYEE:
            raise PermissionDenied("Only employees file EOD reports")
        content = (content or "").strip()
        if not content:
            raise ValueError("Report content required")

        assigned = {p.id for p in self.store.list_projects_by_assignee(session.user_id)}
        if project_id not in assigned:
            raise PermissionDenied(
                f"Employee {session.user_id} has no tasks on project {project_id}"
            )

        now = self.clock()
        report = EODReport(
            id=self.store.next_id("report"),
            employee_id=session.user_id,
            project_id=project_id,
            content=content,
            report_date=now.date(),
            created_at=now,
        )
        self.store.save(report)
        logger.info(f"[EOD] {report.id} filed by {session.user_id} for {project_id}")
        return report

    def for_employee(self, employee_id: str) -> List[EODReport]:
        return self.store.list_reports_by_employee(employee_id)
