"""Business-rule validation for tasks, vehicles and team members.

Pydantic schemas check the shape of a request; the functions here check the
rules that depend on other rows (references, dependencies) or that only
warrant a warning.
"""
from dataclasses import dataclass, field, asdict
from typing import Any, Iterable

from app.schemas.common import PRIORITIES, TASK_STATUSES
from app.utils.timeparse import parse_date, parse_hhmm

MAX_NAME_LENGTH = 255
LONG_TASK_MINUTES = 24 * 60
BREAK_DOWN_MINUTES = 8 * 60


@dataclass
class ValidationIssue:
    field: str
    code: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    suggestions: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error(self, field_name: str, code: str, message: str) -> None:
        self.errors.append(ValidationIssue(field_name, code, message, "error"))

    def warn(self, field_name: str, code: str, message: str) -> None:
        self.warnings.append(ValidationIssue(field_name, code, message, "warning"))

    def suggest(self, field_name: str, code: str, message: str) -> None:
        self.suggestions.append(ValidationIssue(field_name, code, message, "info"))

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "errors": [asdict(e) for e in self.errors],
            "warnings": [asdict(w) for w in self.warnings],
            "suggestions": [asdict(s) for s in self.suggestions],
        }


def as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    return list(value)


def validate_task(
    task: Any,
    vehicles: Iterable[Any] | None = None,
    team_members: Iterable[Any] | None = None,
    existing_tasks: Iterable[Any] | None = None,
) -> ValidationResult:
    """Validate a task row or draft.

    ``task`` may be an ORM row or a pydantic model; only attributes are read.
    Reference checks run only for the context collections that are passed.
    """
    result = ValidationResult()
    get = lambda name: getattr(task, name, None)  # noqa: E731

    name = (get("name") or "").strip()
    if not name:
        result.error("name", "REQUIRED", "Task name is required")
    elif len(name) > MAX_NAME_LENGTH:
        result.error("name", "TOO_LONG", f"Task name must be less than {MAX_NAME_LENGTH} characters")

    vehicle_ids = as_list(get("vehicle_ids"))
    if not vehicle_ids:
        result.error("vehicle_ids", "REQUIRED", "Vehicle assignment is required")
    elif vehicles is not None:
        known = {v.id for v in vehicles}
        unknown = [v for v in vehicle_ids if v not in known]
        if unknown:
            result.error("vehicle_ids", "INVALID_REFERENCE", f"Invalid vehicle ID(s): {', '.join(unknown)}")

    assignees = as_list(get("assignees"))
    if not assignees:
        result.error("assignees", "REQUIRED", "Task assignment is required")
    elif team_members is not None:
        known = {m.name for m in team_members}
        unknown = [a for a in assignees if a not in known]
        if unknown:
            result.error("assignees", "INVALID_REFERENCE", f"Invalid assignee(s): {', '.join(unknown)}")

    status = get("status")
    if status and status not in TASK_STATUSES:
        result.error("status", "INVALID_VALUE", f"Invalid status. Must be one of: {', '.join(TASK_STATUSES)}")

    priority = get("priority")
    if priority and priority not in PRIORITIES:
        result.error("priority", "INVALID_VALUE", f"Invalid priority. Must be one of: {', '.join(PRIORITIES)}")

    _check_times(task, result)
    _check_dates(task, result)
    _check_durations(task, result)
    _check_dependencies(task, result, existing_tasks)

    estimated = get("estimated_duration")
    if priority == "High" and estimated and estimated > BREAK_DOWN_MINUTES:
        result.suggest(
            "task_structure", "CONSIDER_BREAKING_DOWN",
            "High priority tasks over 8 hours might benefit from being broken into smaller tasks",
        )

    description = (get("description") or "").lower()
    if status == "Blocked" and not as_list(get("blocked_by")) and "blocked" not in description:
        result.suggest("blocked_reason", "MISSING_CONTEXT",
                       "Consider adding block reason in description or blocked_by field")

    return result


def _check_times(task: Any, result: ValidationResult) -> None:
    start_raw, end_raw = getattr(task, "start_time", None), getattr(task, "end_time", None)
    start = parse_hhmm(start_raw)
    end = parse_hhmm(end_raw)
    if start_raw and start is None:
        result.error("start_time", "INVALID_FORMAT", "Invalid start time format. Use HH:MM (24-hour)")
    if end_raw and end is None:
        result.error("end_time", "INVALID_FORMAT", "Invalid end time format. Use HH:MM (24-hour)")
    if start is not None and end is not None and start >= end:
        result.error("time_range", "INVALID_RANGE", "End time must be after start time")


def _check_dates(task: Any, result: ValidationResult) -> None:
    start_raw, end_raw = getattr(task, "start_date", None), getattr(task, "end_date", None)
    start = parse_date(start_raw)
    end = parse_date(end_raw)
    if start_raw and start is None:
        result.error("start_date", "INVALID_FORMAT", "Invalid start date format")
    if end_raw and end is None:
        result.error("end_date", "INVALID_FORMAT", "Invalid end date format")
    if start and end and start > end:
        result.error("date_range", "INVALID_RANGE", "End date must be after start date")


def _check_durations(task: Any, result: ValidationResult) -> None:
    estimated = getattr(task, "estimated_duration", None)
    if estimated is not None:
        if estimated <= 0:
            result.error("estimated_duration", "INVALID_VALUE", "Estimated duration must be a positive number")
        elif estimated > LONG_TASK_MINUTES:
            result.warn("estimated_duration", "UNUSUAL_VALUE", "Task duration exceeds 24 hours. Is this correct?")

    actual = getattr(task, "actual_duration", None)
    if actual is not None and actual < 0:
        result.error("actual_duration", "INVALID_VALUE", "Actual duration must be a non-negative number")

    percentage = getattr(task, "completion_percentage", None)
    if percentage is None:
        return
    if not 0 <= percentage <= 100:
        result.error("completion_percentage", "INVALID_RANGE", "Completion percentage must be between 0 and 100")
    status = getattr(task, "status", None)
    if status == "Completed" and percentage < 100:
        result.warn("completion_percentage", "INCONSISTENT_STATE",
                    "Task is marked as completed but completion percentage is less than 100%")
    if status == "Pending" and percentage > 0:
        result.warn("completion_percentage", "INCONSISTENT_STATE", "Task is pending but has completion progress")


def _check_dependencies(task: Any, result: ValidationResult, existing_tasks: Iterable[Any] | None) -> None:
    dependencies = as_list(getattr(task, "dependencies", None))
    if not dependencies:
        return
    task_id = getattr(task, "id", None)
    if task_id and task_id in dependencies:
        result.error("dependencies", "CIRCULAR_DEPENDENCY", "Task cannot depend on itself")
    if existing_tasks is not None:
        known = {t.id for t in existing_tasks}
        unknown = [d for d in dependencies if d not in known and d != task_id]
        if unknown:
            result.error("dependencies", "INVALID_REFERENCE", f"Invalid dependency task IDs: {', '.join(unknown)}")


def validate_vehicle(vehicle: Any, project_days: int) -> list[str]:
    """Return the business-rule violations of a vehicle row or draft."""
    errors: list[str] = []
    if not (getattr(vehicle, "id", "") or "").strip():
        errors.append("Vehicle ID is required")
    if not (getattr(vehicle, "type", "") or "").strip():
        errors.append("Vehicle type is required")
    if not (getattr(vehicle, "location", "") or "").strip():
        errors.append("Location is required")

    day = getattr(vehicle, "day", None)
    if day is None or not 1 <= day <= project_days:
        errors.append(f"Day must be between 1 and {project_days}")
    if not (getattr(vehicle, "time_slot", "") or "").strip():
        errors.append("Time slot is required")

    for attr, label in (("gps_required", "GPS devices"), ("fuel_sensors", "Fuel sensors"),
                        ("fuel_tanks", "Fuel tanks")):
        if (getattr(vehicle, attr, 0) or 0) < 0:
            errors.append(f"{label} cannot be negative")

    if (getattr(vehicle, "fuel_sensors", 0) or 0) > (getattr(vehicle, "fuel_tanks", 0) or 0):
        errors.append("Fuel sensors cannot exceed fuel tanks")
    return errors
