"""
Error collector for a single unit of work.

A reporter is created per request and handed to the services that run in
it, so reports from concurrent invocations never mix.
"""
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Optional

from marketplace.errors import error_message
from marketplace.logging import get_logger, sanitize_string_for_logging
from marketplace.models import utcnow_iso

logger = get_logger(__name__)

MAX_REPORTS = 100


@dataclass
class ErrorReport:
    component: str
    action: str
    error: BaseException
    context: dict[str, Any] = field(default_factory=dict)
    fatal: bool = False
    timestamp: str = field(default_factory=utcnow_iso)

    @property
    def message(self) -> str:
        return error_message(self.error)


class ErrorReporter:
    """Bounded in-memory list of ErrorReport entries that also logs each one."""

    def __init__(self, max_reports: int = MAX_REPORTS) -> None:
        self._reports: deque[ErrorReport] = deque(maxlen=max_reports)

    def report(
        self,
        component: str,
        action: str,
        error: BaseException,
        context: Optional[dict[str, Any]] = None,
        fatal: bool = False,
    ) -> ErrorReport:
        """Record an error and log it (ERROR when fatal, WARNING otherwise)."""
        entry = ErrorReport(
            component=component,
            action=action,
            error=error,
            context=dict(context or {}),
            fatal=fatal,
        )
        self._reports.append(entry)

        log = logger.error if fatal else logger.warning
        log(
            f"[{component}] {action}: {sanitize_string_for_logging(entry.message)}",
            exc_info=(type(error), error, error.__traceback__) if fatal else None,
        )
        return entry

    def get_reports(self) -> list[ErrorReport]:
        return list(self._reports)

    def get_by_component(self, component: str) -> list[ErrorReport]:
        return [r for r in self._reports if r.component == component]

    @property
    def has_errors(self) -> bool:
        return bool(self._reports)

    def clear(self) -> None:
        self._reports.clear()

    def __len__(self) -> int:
        return len(self._reports)
