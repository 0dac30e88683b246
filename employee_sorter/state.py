"""
Application state controller.

Holds one browser session's roster, ranking and task assignments in memory
and sequences user actions into the PDF renderer and the three model calls.

Every roster mutation bumps `roster_version`. Every applied or cleared ranking
bumps `ranked_version`. Remote calls capture the versions they depend on
when they start, and their result is dropped if either moved on before they
resolved. A slow ranking can never overwrite a newer roster, and slow
assignments can never be shown against a newer ranking.
"""

import logging
import time

from employee_sorter.backend_layer import build_employee, parse_task_list
from employee_sorter.config import NOTIFICATION_SECONDS, PDF_MIME_TYPE
from employee_sorter.errors import InvalidUpload, SorterError
from employee_sorter.llm_layer import analyze_resume, distribute_tasks, rank_employees
from employee_sorter.models import (
    AnalyzedEmployee,
    Employee,
    Notification,
    RankedEmployee,
    ResumeUpload,
    TaskAssignment,
)
from employee_sorter.pdf_layer import arender_pdf_pages

logger = logging.getLogger(__name__)

ANALYZING = "analyzing"
RANKING = "ranking"
DISTRIBUTING = "distributing"


class SessionState:
    def __init__(
        self,
        clock=time.monotonic,
        renderer=arender_pdf_pages,
        analyzer=analyze_resume,
        ranker=rank_employees,
        distributor=distribute_tasks,
        notification_seconds: float = NOTIFICATION_SECONDS,
    ):
        self._clock = clock
        self._render = renderer
        self._analyze = analyzer
        self._rank = ranker
        self._distribute = distributor
        self.notification_seconds = notification_seconds

        self.employees: list[AnalyzedEmployee] = []
        self.roster_version = 0
        self.ranked_version = 0
        self.ranked_employees: list[RankedEmployee] = []
        self.assignments: list[TaskAssignment] = []

        self.busy = {ANALYZING: False, RANKING: False, DISTRIBUTING: False}

        # "Add employee" form
        self.name = ""
        self.resume: ResumeUpload | None = None

        self._notification: Notification | None = None
        self.notification_log: list[Notification] = []

    # -------------------------
    # Derived state
    # -------------------------
    @property
    def is_ranked(self) -> bool:
        return len(self.ranked_employees) > 0

    def display_roster(self) -> list[Employee]:
        return list(self.ranked_employees) if self.is_ranked else list(self.employees)

    def employee_names(self) -> dict[str, str]:
        return {e.id: e.name for e in self.ranked_employees}

    # -------------------------
    # Notifications
    # -------------------------
    def notify(self, error: SorterError) -> Notification:
        note = Notification(kind=error.kind, message=error.message, raised_at=self._clock())
        self._notification = note
        self.notification_log.append(note)
        return note

    def notification(self, now: float | None = None) -> Notification | None:
        """The current notification, or None once it has expired."""
        note = self._notification
        if note is None:
            return None
        now = self._clock() if now is None else now
        if now - note.raised_at >= self.notification_seconds:
            self._notification = None
            return None
        return note

    def dismiss_notification(self):
        self._notification = None

    # -------------------------
    # Form
    # -------------------------
    def set_name(self, name: str):
        self.name = name or ""

    def select_resume(self, upload: ResumeUpload | None) -> bool:
        """
        Accepts one PDF upload. Anything else is rejected with an InvalidUpload
        notification and the file selection is cleared; the name is kept.
        """
        if upload is None:
            self.resume = None
            return False
        if upload.mime_type != PDF_MIME_TYPE:
            logger.info("Rejected upload %r (%s)", upload.filename, upload.mime_type)
            self.resume = None
            self.notify(InvalidUpload())
            return False
        self.resume = upload
        self.dismiss_notification()
        return True

    def can_add_employee(self, name: str | None = None) -> bool:
        """`name` overrides the stored form name with the live widget value."""
        name = self.name if name is None else (name or "")
        return bool(name.strip()) and self.resume is not None and not self.busy[ANALYZING]

    # -------------------------
    # Actions
    # -------------------------
    def _bump_roster(self):
        self.roster_version += 1
        # The analyzed-only roster is now stale relative to any previous rank
        self.ranked_employees = []
        self.ranked_version += 1
        self.assignments = []

    async def add_employee(self) -> AnalyzedEmployee | None:
        if not self.can_add_employee():
            return None

        name = self.name.strip()
        upload = self.resume
        if upload.mime_type != PDF_MIME_TYPE:
            self.resume = None
            self.notify(InvalidUpload())
            return None

        self.busy[ANALYZING] = True
        self.dismiss_notification()
        try:
            images = await self._render(upload.data)
            analysis = await self._analyze(images)
        except SorterError as exc:
            self.notify(exc)
            return None
        finally:
            self.busy[ANALYZING] = False

        employee = build_employee(name, analysis)
        self.employees = [*self.employees, employee]
        self._bump_roster()
        self.name = ""
        self.resume = None
        logger.info("Added employee %s (roster size %d)", employee.id, len(self.employees))
        return employee

    async def rank(self) -> list[RankedEmployee] | None:
        if self.busy[RANKING] or not self.employees:
            return None

        version = self.roster_version
        roster = list(self.employees)
        self.busy[RANKING] = True
        self.dismiss_notification()
        try:
            ranked = await self._rank(roster)
        except SorterError as exc:
            self.notify(exc)
            return None
        finally:
            self.busy[RANKING] = False

        if version != self.roster_version:
            logger.warning("Discarding stale ranking (roster v%d, now v%d)", version, self.roster_version)
            return None

        self.ranked_employees = ranked
        self.ranked_version += 1
        return ranked

    async def distribute(self, tasks_text: str) -> list[TaskAssignment] | None:
        if self.busy[DISTRIBUTING] or not self.is_ranked:
            return None
        tasks = parse_task_list(tasks_text)
        if not tasks:
            return None

        version = (self.roster_version, self.ranked_version)
        ranked = list(self.ranked_employees)
        self.busy[DISTRIBUTING] = True
        self.dismiss_notification()
        try:
            assignments = await self._distribute(ranked, tasks)
        except SorterError as exc:
            self.notify(exc)
            return None
        finally:
            self.busy[DISTRIBUTING] = False

        if version != (self.roster_version, self.ranked_version):
            logger.warning(
                "Discarding stale assignments (roster/ranking v%d/%d, now v%d/%d)",
                *version, self.roster_version, self.ranked_version,
            )
            return None

        self.assignments = assignments
        return assignments
