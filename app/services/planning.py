"""Task templates, wizard step validation and automatic scheduling."""
import logging
import math
from datetime import date, datetime, timedelta
from typing import Any, Sequence

from app.schemas.planning import WizardState, WorkingHours
from app.schemas.task import TaskDraft
from app.services.validation import ValidationResult, as_list, validate_task
from app.utils.timeparse import format_minutes, parse_hhmm

logger = logging.getLogger(__name__)

DEFAULT_TASK_MINUTES = 60
WORKDAY_MINUTES = 8 * 60
STANDARD_DAY_START = 9 * 60
STANDARD_DAY_END = 17 * 60
STANDARD_BUFFER_MINUTES = 15

STANDARD_TASKS = [
    {"name": "Vehicle Inspection", "description": "Pre-installation vehicle assessment and documentation",
     "priority": "High", "estimated_duration": 30, "tags": ["inspection", "pre-installation"]},
    {"name": "GPS Device Installation", "description": "Install and mount GPS tracking devices",
     "priority": "High", "estimated_duration": 60, "tags": ["gps", "installation"]},
    {"name": "Fuel Sensor Installation", "description": "Install fuel level sensors in tanks",
     "priority": "High", "estimated_duration": 90, "tags": ["fuel-sensor", "installation"]},
    {"name": "System Configuration", "description": "Configure GPS and sensor settings",
     "priority": "High", "estimated_duration": 45, "tags": ["configuration", "system"]},
    {"name": "Fuel Sensor Calibration", "description": "Calibrate fuel sensors for accurate fuel level readings",
     "priority": "High", "estimated_duration": 60, "tags": ["calibration", "fuel-sensor"]},
    {"name": "Quality Assurance", "description": "Final system testing and validation",
     "priority": "Medium", "estimated_duration": 30, "tags": ["qa", "testing"]},
    {"name": "Documentation", "description": "Complete installation documentation",
     "priority": "Medium", "estimated_duration": 20, "tags": ["documentation", "completion"]},
]

TEMPLATES = {
    "gps-installation": {
        "id": "gps-installation",
        "name": "Standard GPS Installation",
        "description": "Complete GPS tracking system installation workflow",
        "category": "installation",
        "tasks": [
            {"name": "Vehicle Inspection", "description": "Pre-installation vehicle assessment",
             "priority": "High", "estimated_duration": 30, "tags": ["inspection", "pre-installation"]},
            {"name": "GPS Device Installation", "description": "Install and mount GPS tracking device",
             "priority": "High", "estimated_duration": 60, "tags": ["gps", "installation", "hardware"]},
            {"name": "Fuel Sensor Installation", "description": "Install fuel level monitoring sensors",
             "priority": "High", "estimated_duration": 90, "tags": ["fuel-sensor", "installation", "hardware"]},
            {"name": "System Configuration", "description": "Configure GPS and sensor settings",
             "priority": "High", "estimated_duration": 45, "tags": ["configuration", "software"]},
            {"name": "Quality Assurance Testing", "description": "Test all installed systems",
             "priority": "Medium", "estimated_duration": 30, "tags": ["qa", "testing", "validation"]},
        ],
    },
    "maintenance-check": {
        "id": "maintenance-check",
        "name": "Maintenance Check",
        "description": "Routine maintenance and system verification",
        "category": "maintenance",
        "tasks": [
            {"name": "System Health Check", "description": "Verify GPS and sensor functionality",
             "priority": "High", "estimated_duration": 45, "tags": ["health-check", "verification"]},
            {"name": "Calibration Check", "description": "Verify and adjust sensor calibration",
             "priority": "Medium", "estimated_duration": 45, "tags": ["calibration", "sensors"]},
            {"name": "Documentation Update", "description": "Update maintenance records",
             "priority": "Low", "estimated_duration": 30, "tags": ["documentation", "records"]},
        ],
    },
}


def list_templates() -> list[dict]:
    return [
        {**t, "estimated_total_duration": sum(task["estimated_duration"] for task in t["tasks"])}
        for t in TEMPLATES.values()
    ]


def template_tasks(template_id: str | None) -> list[TaskDraft]:
    if not template_id:
        return []
    template = TEMPLATES.get(template_id)
    if template is None:
        raise KeyError(template_id)
    return [TaskDraft(**task) for task in template["tasks"]]


def standard_task_plan(vehicle_id: str, assignee: str, start_date: date) -> list[TaskDraft]:
    """The standard installation sequence for one vehicle.

    Starts at 09:00 with a 15-minute gap between steps; a step that would
    start at or after 17:00 wraps back to 09:00.
    """
    drafts = []
    current = STANDARD_DAY_START
    for step in STANDARD_TASKS:
        end = current + step["estimated_duration"]
        drafts.append(TaskDraft(
            **step,
            vehicle_ids=[vehicle_id],
            assignees=[assignee],
            start_time=format_minutes(current),
            end_time=format_minutes(end),
            start_date=start_date.isoformat(),
            duration_days=1,
        ))
        current = end + STANDARD_BUFFER_MINUTES
        if current >= STANDARD_DAY_END:
            current = STANDARD_DAY_START
    return drafts


def validate_wizard_step(state: WizardState, step: int, now: datetime | None = None) -> ValidationResult:
    result = ValidationResult()

    if step == 1:
        if not state.selected_vehicles:
            result.error("selected_vehicles", "REQUIRED", "At least one vehicle must be selected")
    elif step == 2:
        if not state.template_id and not state.custom_tasks:
            result.error("tasks", "REQUIRED", "Either select a template or create custom tasks")
        if state.template_id and state.template_id not in TEMPLATES:
            result.error("template_id", "INVALID_REFERENCE", f"Unknown template: {state.template_id}")
        for index, task in enumerate(state.custom_tasks):
            for issue in validate_task(task).errors:
                result.error(f"custom_tasks[{index}].{issue.field}", issue.code,
                             f"Task {index + 1}: {issue.message}")
    elif step == 3:
        if state.start_datetime is None:
            result.error("start_datetime", "REQUIRED", "Start date and time is required")
        else:
            now = now or datetime.now(state.start_datetime.tzinfo)
            if state.start_datetime < now:
                result.warn("start_datetime", "PAST_DATE", "Start date is in the past")
        if not state.working_hours.work_days:
            result.error("working_hours.work_days", "REQUIRED", "At least one working day must be selected")
        start = parse_hhmm(state.working_hours.start)
        end = parse_hhmm(state.working_hours.end)
        if start is None or end is None or start >= end:
            result.error("working_hours", "INVALID_RANGE", "Working hours must be a valid HH:MM range")

    return result


def _is_work_day(day: date, work_days: Sequence[int]) -> bool:
    # 0 = Sunday, matching the client's day numbering
    return (day.isoweekday() % 7) in work_days


def _next_work_day(day: date, work_days: Sequence[int]) -> date:
    day += timedelta(days=1)
    for _ in range(7):
        if _is_work_day(day, work_days):
            return day
        day += timedelta(days=1)
    return day


def schedule_tasks(tasks: Sequence[TaskDraft], mode: str, start: datetime,
                   working_hours: WorkingHours, vehicle_ids: Sequence[str]) -> list[TaskDraft]:
    """Assign dates and times to planned tasks.

    ``sequential`` runs tasks back-to-back on the first selected vehicle
    inside working hours, moving to the next work day when a task would run
    past the end of the day. ``parallel`` starts every task at the start of
    the first day and spreads them over the selected vehicles. Any other
    mode leaves the tasks as they are.
    """
    if not tasks or mode not in ("sequential", "parallel"):
        return [t.model_copy(deep=True) for t in tasks]

    work_days = working_hours.work_days or [1, 2, 3, 4, 5]
    day_start = parse_hhmm(working_hours.start)
    day_end = parse_hhmm(working_hours.end)
    if day_start is None:
        day_start = 8 * 60
    if day_end is None:
        day_end = 17 * 60

    day = start.date()
    if not _is_work_day(day, work_days):
        day = _next_work_day(day, work_days)
    cursor = day_start

    scheduled = []
    for index, task in enumerate(tasks):
        duration = task.estimated_duration or DEFAULT_TASK_MINUTES
        planned = task.model_copy(deep=True)

        if mode == "sequential":
            if cursor + duration > day_end and cursor > day_start:
                day = _next_work_day(day, work_days)
                cursor = day_start
            begin = cursor
            cursor += duration
            if vehicle_ids:
                planned.vehicle_ids = [vehicle_ids[0]]
        else:
            begin = day_start
            if vehicle_ids:
                planned.vehicle_ids = [vehicle_ids[index % len(vehicle_ids)]]

        planned.start_date = day.isoformat()
        planned.end_date = day.isoformat()
        planned.start_time = format_minutes(begin)
        planned.end_time = format_minutes(begin + duration)
        scheduled.append(planned)

    logger.info("Scheduled %d tasks in %s mode starting %s", len(scheduled), mode, start.date())
    return scheduled


def assign_team(tasks: Sequence[TaskDraft], team_members: Sequence[Any], strategy: str,
                existing_tasks: Sequence[Any] = ()) -> list[TaskDraft]:
    """Fill in assignees for tasks that have none.

    ``auto`` cycles through the team in order; ``load-balance`` always picks
    the member with the fewest tasks so far, counting stored tasks too;
    ``manual`` leaves tasks unassigned.
    """
    assigned = [t.model_copy(deep=True) for t in tasks]
    names = [m.name for m in team_members]
    if strategy == "manual" or not names:
        return assigned

    load = {name: 0 for name in names}
    for task in list(existing_tasks) + assigned:
        for name in as_list(task.assignees):
            if name in load:
                load[name] += 1

    turn = 0
    for task in assigned:
        if task.assignees:
            continue
        if strategy == "load-balance":
            pick = min(names, key=lambda n: load[n])
        else:
            pick = names[turn % len(names)]
            turn += 1
        task.assignees = [pick]
        load[pick] += 1
    return assigned


def completion_date(tasks: Sequence[TaskDraft], start: datetime | None) -> str | None:
    if not tasks or start is None:
        return None
    total = sum(t.estimated_duration or 0 for t in tasks)
    days = math.ceil(total / WORKDAY_MINUTES)
    return (start.date() + timedelta(days=days)).isoformat()


def resource_utilization(tasks: Sequence[Any], team_members: Sequence[Any]) -> float:
    if not team_members:
        return 0.0
    assigned = {name for t in tasks for name in as_list(t.assignees)}
    return round(len(assigned) / len(team_members) * 100, 1)


def plan_metrics(state: WizardState, tasks: Sequence[TaskDraft], team_members: Sequence[Any]) -> dict:
    total = sum(t.estimated_duration or 0 for t in tasks)
    return {
        "total_tasks": len(tasks),
        "total_duration": total,
        "average_duration_per_task": round(total / len(tasks), 1) if tasks else 0,
        "estimated_completion_date": completion_date(tasks, state.start_datetime),
        "resource_utilization": resource_utilization(tasks, team_members),
        "vehicle_count": len(state.selected_vehicles),
    }
