"""Pairwise detection of scheduling conflicts between tasks."""
import logging
from dataclasses import dataclass, field, asdict
from datetime import timedelta
from typing import Any, Sequence

from app.services.validation import as_list
from app.utils.timeparse import format_minutes, parse_date, parse_hhmm

logger = logging.getLogger(__name__)

DEFAULT_TASK_MINUTES = 60


@dataclass
class Resolution:
    action: str  # reschedule | reassign
    task_id: str | None
    new_start_time: str | None = None
    new_start_date: str | None = None


@dataclass
class Conflict:
    id: str
    type: str  # time | resource | dependency
    severity: str  # medium | high | critical
    description: str
    conflicting_tasks: list[str]
    auto_resolvable: bool
    suggested_resolution: Resolution | None = None


@dataclass
class ConflictReport:
    conflicts: list[Conflict] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    @property
    def critical_count(self) -> int:
        return sum(1 for c in self.conflicts if c.severity == "critical")

    def to_dict(self) -> dict:
        return {
            "conflicts": [asdict(c) for c in self.conflicts],
            "suggestions": self.suggestions,
            "critical_count": self.critical_count,
        }


def _window(task: Any) -> tuple[int, int] | None:
    start = parse_hhmm(getattr(task, "start_time", None))
    end = parse_hhmm(getattr(task, "end_time", None))
    if start is None or end is None:
        return None
    return start, end


def _same_day(task1: Any, task2: Any) -> bool:
    day1 = parse_date(getattr(task1, "start_date", None))
    day2 = parse_date(getattr(task2, "start_date", None))
    return day1 is None or day2 is None or day1 == day2


def overlaps(task1: Any, task2: Any) -> bool:
    """Half-open ``[start, end)`` overlap of two tasks on the same day."""
    w1, w2 = _window(task1), _window(task2)
    if w1 is None or w2 is None or not _same_day(task1, task2):
        return False
    return w1[0] < w2[1] and w2[0] < w1[1]


def _shared(first: list, second: list):
    return next((item for item in first if item in second), None)


def detect_conflicts(tasks: Sequence[Any]) -> ConflictReport:
    report = ConflictReport()

    for i, task1 in enumerate(tasks):
        for j in range(i + 1, len(tasks)):
            task2 = tasks[j]
            if not overlaps(task1, task2):
                continue

            vehicle = _shared(as_list(task1.vehicle_ids), as_list(task2.vehicle_ids))
            if vehicle is not None:
                report.conflicts.append(Conflict(
                    id=f"time-conflict-{i}-{j}",
                    type="time",
                    severity="high",
                    description=f'Time conflict between "{task1.name}" and "{task2.name}" on vehicle {vehicle}',
                    conflicting_tasks=[task1.id, task2.id],
                    auto_resolvable=True,
                    suggested_resolution=Resolution("reschedule", task2.id, new_start_time=task1.end_time),
                ))

            assignee = _shared(as_list(task1.assignees), as_list(task2.assignees))
            if assignee is not None:
                report.conflicts.append(Conflict(
                    id=f"resource-conflict-{i}-{j}",
                    type="resource",
                    severity="medium",
                    description=f'Resource conflict: "{assignee}" assigned to overlapping tasks',
                    conflicting_tasks=[task1.id, task2.id],
                    auto_resolvable=True,
                    suggested_resolution=Resolution("reassign", task2.id),
                ))

    by_id = {t.id: t for t in tasks if t.id}
    for task in tasks:
        for dep_id in as_list(getattr(task, "dependencies", None)):
            dependency = by_id.get(dep_id)
            if dependency is None:
                report.conflicts.append(Conflict(
                    id=f"missing-dependency-{task.id}-{dep_id}",
                    type="dependency",
                    severity="critical",
                    description=f'Task "{task.name}" depends on missing task {dep_id}',
                    conflicting_tasks=[task.id],
                    auto_resolvable=False,
                ))
                continue
            start = parse_date(task.start_date)
            dep_end = parse_date(dependency.end_date)
            if start and dep_end and start <= dep_end:
                report.conflicts.append(Conflict(
                    id=f"dependency-timing-{task.id}-{dep_id}",
                    type="dependency",
                    severity="high",
                    description=f'Task "{task.name}" scheduled before dependency "{dependency.name}" completes',
                    conflicting_tasks=[task.id, dep_id],
                    auto_resolvable=True,
                    suggested_resolution=Resolution(
                        "reschedule", task.id, new_start_date=(dep_end + timedelta(days=1)).isoformat()),
                ))

    if not report.conflicts:
        report.suggestions.append("No conflicts detected. The schedule is clear.")
    else:
        auto = sum(1 for c in report.conflicts if c.auto_resolvable)
        if auto:
            report.suggestions.append(f"{auto} conflict(s) can be automatically resolved")
        if report.critical_count:
            report.suggestions.append(f"{report.critical_count} critical conflict(s) require manual attention")

    logger.debug("Checked %d tasks: %d conflicts", len(tasks), len(report.conflicts))
    return report


def _length(task: Any) -> int:
    window = _window(task)
    if window is not None and window[1] > window[0]:
        return window[1] - window[0]
    return getattr(task, "estimated_duration", None) or DEFAULT_TASK_MINUTES


def resolve_conflicts(tasks: Sequence[Any], conflicts: Sequence[Conflict],
                      team_members: Sequence[Any]) -> list:
    """Apply the suggested resolutions of auto-resolvable conflicts.

    ``tasks`` are pydantic models; resolved copies are returned and the input
    is left untouched. A rescheduled task keeps its own length.
    """
    resolved = [t.model_copy(deep=True) for t in tasks]
    by_id = {t.id: t for t in resolved if t.id}

    for conflict in conflicts:
        resolution = conflict.suggested_resolution
        if not conflict.auto_resolvable or resolution is None:
            continue
        target = by_id.get(resolution.task_id)
        if target is None:
            continue

        if resolution.action == "reschedule":
            if resolution.new_start_time:
                length = _length(target)
                start = parse_hhmm(resolution.new_start_time)
                target.start_time = format_minutes(start)
                target.end_time = format_minutes(start + length)
            if resolution.new_start_date:
                old_start, old_end = parse_date(target.start_date), parse_date(target.end_date)
                new_start = parse_date(resolution.new_start_date)
                target.start_date = resolution.new_start_date
                if old_start and old_end and new_start:
                    target.end_date = (new_start + (old_end - old_start)).isoformat()
        elif resolution.action == "reassign":
            busy = {name for other in resolved if other is not target and overlaps(other, target)
                    for name in as_list(other.assignees)}
            free = [m.name for m in team_members if m.name not in busy]
            if free:
                target.assignees = [free[0]]
            else:
                logger.info("No free team member to take task %s", target.id)

    return resolved
