"""Rule-based fallback provider (no network, no model)."""

import re
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta
from typing import Literal

from todo_assistant.api.models import ModificationResult, SummaryReport, Task, TaskDraft
from todo_assistant.providers.base import (
    CompletionResult,
    Message,
    ProviderKind,
    UnsupportedOperationError,
)
from todo_assistant.providers.summary import summarize_statuses

HIGH_PRIORITY_KEYWORDS = ("紧急", "马上", "立刻", "尽快", "很重要", "重要", "urgent", "asap", "important")
LOW_PRIORITY_KEYWORDS = ("不急", "以后", "有空", "慢慢", "later", "sometime")

# (pattern, days from now); "day after tomorrow" is checked before "tomorrow"
DAY_PATTERNS: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"后天|\bday[\s-]+after[\s-]+tomorrow\b", re.IGNORECASE), 2),
    (re.compile(r"今天|\btoday\b", re.IGNORECASE), 0),
    (re.compile(r"明天|\btomorrow\b", re.IGNORECASE), 1),
)

CLOCK_TIME = re.compile(r"(\d{1,2})[:：](\d{2})")
HOUR_MARK = re.compile(r"(\d{1,2})点")

TAG_PATTERNS = (
    re.compile(r"#(\w+)", re.ASCII),
    re.compile(r"【([^】]+)】"),
)

TITLE_LENGTH = 50
DATE_FORMAT = "%Y-%m-%d %H:%M"


class RuleBasedProvider:
    """Keyword and regex based task extraction.

    Every structured operation returns a populated result for any input.
    Generic completion is not supported.
    """

    kind: Literal[ProviderKind.RULE_BASED] = ProviderKind.RULE_BASED

    def __init__(self, now: Callable[[], datetime] = datetime.now) -> None:
        """Initialize with a clock (injectable for tests)."""
        self._now = now

    @property
    def name(self) -> str:
        return "simple"

    def is_available(self) -> bool:
        return True

    def get_supported_models(self) -> list[str]:
        return ["rule-based"]

    async def complete(
        self, messages: Sequence[Message], model: str | None = None, temperature: float = 0.3
    ) -> CompletionResult:
        raise UnsupportedOperationError("Simple provider does not support generic completion")

    def parse_task(self, text: str) -> TaskDraft:
        """Extract a task draft from text."""
        return TaskDraft(
            title=text[:TITLE_LENGTH],
            description="",
            priority=self.extract_priority(text),
            due_date=self.extract_due_date(text),
            tags=self.extract_tags(text),
            reminder=None,
        )

    def parse_modification(self, text: str, current_task: Task) -> ModificationResult:
        """Acknowledge a modification request without changing anything."""
        return ModificationResult(explanation="Understood your modification request")

    def generate_summary(self, tasks: Sequence[Task]) -> SummaryReport:
        """Summarize a task list from status counts."""
        counts = summarize_statuses(tasks)
        return SummaryReport(
            completion_rate=counts.completion_rate,
            completed_tasks=counts.completed,
            pending_tasks=counts.pending,
            overdue_tasks=counts.overdue,
            suggestions=["Keep focused on your pending tasks"],
            summary_text=(
                f"You have {counts.total} tasks, {len(counts.completed)} completed "
                f"({counts.rate}% completion rate)."
            ),
        )

    @staticmethod
    def extract_priority(text: str) -> str:
        """High keywords win over low keywords; medium otherwise."""
        lower = text.lower()
        if any(keyword in lower for keyword in HIGH_PRIORITY_KEYWORDS):
            return "high"
        if any(keyword in lower for keyword in LOW_PRIORITY_KEYWORDS):
            return "low"
        return "medium"

    def extract_due_date(self, text: str) -> str | None:
        """Resolve a relative day keyword plus an optional time of day.

        Without a day keyword no date is produced, even if a time is present.
        """
        days = next((offset for pattern, offset in DAY_PATTERNS if pattern.search(text)), None)
        if days is None:
            return None

        due = self._now() + timedelta(days=days)

        clock = CLOCK_TIME.search(text)
        hour_mark = None if clock else HOUR_MARK.search(text)
        if clock:
            due = _at_time(due, int(clock.group(1)), int(clock.group(2)))
        elif hour_mark:
            due = _at_time(due, int(hour_mark.group(1)), 0)

        return due.strftime(DATE_FORMAT)

    @staticmethod
    def extract_tags(text: str) -> list[str]:
        """Collect ``#tag`` matches, then ``【tag】`` matches."""
        tags: list[str] = []
        for pattern in TAG_PATTERNS:
            tags.extend(match.group(1) for match in pattern.finditer(text))
        return tags


def _at_time(moment: datetime, hour: int, minute: int) -> datetime:
    # Out-of-range values roll over into the following day(s)
    midnight = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight + timedelta(hours=hour, minutes=minute)
