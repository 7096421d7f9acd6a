"""Gantt timeline construction and layout for one project day.

Bars are built from stored task times when present; tasks without times are
laid out back-to-back from the start of their vehicle's time slot.
"""
import logging
import math
import re
from collections import defaultdict
from dataclasses import dataclass, asdict
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Sequence

from app.services.validation import as_list
from app.utils.timeparse import at_minutes, date_for_day, parse_hhmm, parse_time_slot

logger = logging.getLogger(__name__)

SHARED_GROUP = "Shared Tasks"

STAGE_ORDER = {
    "Vehicle Inspection": 1,
    "GPS Installation": 2,
    "GPS Device Installation": 2,
    "Fuel Sensor Installation": 3,
    "System Configuration": 4,
    "Fuel Sensor Calibration": 5,
    "Quality Assurance": 6,
    "Documentation": 7,
}
LAST_STAGE = 8

STATUS_COLORS = {
    "Completed": ("#10B981", "#FFFFFF"),
    "In Progress": ("#3B82F6", "#FFFFFF"),
    "Blocked": ("#EF4444", "#FFFFFF"),
}
# first keyword match wins
NAME_COLORS = [
    (("vehicle", "inspection"), ("#F59E0B", "#1F2937")),
    (("gps", "installation"), ("#8B5CF6", "#FFFFFF")),
    (("fuel", "sensor"), ("#06B6D4", "#FFFFFF")),
    (("system", "configuration"), ("#84CC16", "#1F2937")),
    (("quality", "documentation"), ("#F97316", "#FFFFFF")),
    (("lunch", "break"), ("#6B7280", "#FFFFFF")),
]
DEFAULT_COLORS = ("#9CA3AF", "#1F2937")

MIN_BAR_WIDTH = 80
EARLIEST_START = 6 * 60
LATEST_END_FLOOR = 18 * 60

_VEHICLE_PREFIX_RE = re.compile(r"^V\d{3,4}\s+")
_VEHICLE_SUFFIX_RE = re.compile(r"\s*-\s*V\d{3,4}$")


@dataclass
class GanttBar:
    id: str
    name: str
    vehicle_id: str | None
    vehicle_type: str
    location: str
    start: datetime
    end: datetime
    duration: int  # minutes
    progress: int
    status: str
    priority: str
    assigned_to: str
    category: str
    color: str
    text_color: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["start"] = self.start.isoformat()
        data["end"] = self.end.isoformat()
        return data


def clean_task_name(name: str) -> str:
    """Strip a vehicle id prefix (``V001 ...``) or suffix (``... - V001``)."""
    if not name:
        return name
    cleaned = _VEHICLE_SUFFIX_RE.sub("", _VEHICLE_PREFIX_RE.sub("", name)).strip()
    return cleaned or name


def default_duration(name: str, estimated: int | None = None) -> int:
    if estimated and estimated > 0:
        return estimated
    lowered = name.lower()
    if "vehicle" in lowered or "inspection" in lowered:
        return 30
    if "gps" in lowered and "installation" in lowered:
        return 60
    if "fuel" in lowered and "sensor" in lowered:
        return 90
    if "system" in lowered and "configuration" in lowered:
        return 45
    if "quality" in lowered or "assurance" in lowered:
        return 30
    if "calibration" in lowered or "documentation" in lowered:
        return 20
    return 45


def category_for(name: str) -> str:
    lowered = name.lower()
    if "break" in lowered or "lunch" in lowered:
        return "break"
    if "inspect" in lowered:
        return "inspection"
    if "install" in lowered:
        return "installation"
    if "config" in lowered:
        return "configuration"
    if "calibrat" in lowered:
        return "calibration"
    if "document" in lowered:
        return "documentation"
    return "testing"


def colors_for(name: str, status: str) -> tuple[str, str]:
    if status in STATUS_COLORS:
        return STATUS_COLORS[status]
    lowered = name.lower()
    for keywords, colors in NAME_COLORS:
        if any(k in lowered for k in keywords):
            return colors
    return DEFAULT_COLORS


def _progress(status: str) -> int:
    return {"Completed": 100, "In Progress": 50}.get(status, 0)


def _is_shared_break(task: Any) -> bool:
    return not as_list(task.vehicle_ids) and "Break" in (task.name or "")


def _make_bar(task: Any, vehicle: Any | None, vehicle_id: str | None,
              start: datetime, end: datetime) -> GanttBar:
    status = "Pending" if task.status == "Scheduled" else task.status
    bg, fg = colors_for(task.name, task.status)
    assignees = as_list(task.assignees)
    return GanttBar(
        id=task.id,
        name=clean_task_name(task.name),
        vehicle_id=vehicle_id,
        vehicle_type=vehicle.type if vehicle is not None else "Shared",
        location=vehicle.location if vehicle is not None else "All Locations",
        start=start,
        end=end,
        duration=int((end - start).total_seconds() // 60),
        progress=_progress(task.status),
        status=status,
        priority=task.priority,
        assigned_to=assignees[0] if assignees else "",
        category=category_for(task.name),
        color=bg,
        text_color=fg,
    )


def build_day_timeline(vehicles: Iterable[Any], tasks: Iterable[Any],
                       project_start: str | date, day: int) -> list[GanttBar]:
    display_date = date_for_day(project_start, day)
    day_vehicles = {v.id: v for v in sorted((v for v in vehicles if v.day == day), key=lambda v: v.id)}

    groups: dict[str, list] = defaultdict(list)
    for task in tasks:
        linked = [vid for vid in as_list(task.vehicle_ids) if vid in day_vehicles]
        for vid in linked:
            groups[vid].append(task)
        if not linked and _is_shared_break(task):
            groups[SHARED_GROUP].append(task)

    bars: list[GanttBar] = []
    for group_key, group_tasks in groups.items():
        if group_key == SHARED_GROUP:
            for task in sorted(group_tasks, key=lambda t: t.start_time or ""):
                start, end = parse_hhmm(task.start_time), parse_hhmm(task.end_time)
                if start is None or end is None:
                    continue
                bars.append(_make_bar(task, None, None, at_minutes(display_date, start),
                                      at_minutes(display_date, end)))
            continue

        vehicle = day_vehicles[group_key]
        slot = parse_time_slot(vehicle.time_slot)
        if slot is None:
            logger.warning("Vehicle %s has unreadable time slot %r", vehicle.id, vehicle.time_slot)
            continue
        cursor, slot_end = slot
        if slot_end <= cursor:
            logger.warning("Vehicle %s has time slot %r ending before it starts", vehicle.id, vehicle.time_slot)
            continue

        ordered = sorted(group_tasks, key=lambda t: STAGE_ORDER.get(clean_task_name(t.name), LAST_STAGE))
        for task in ordered:
            start, end = parse_hhmm(task.start_time), parse_hhmm(task.end_time)
            if start is None or end is None:
                start = cursor
                end = min(cursor + default_duration(task.name, task.estimated_duration), slot_end)
                cursor = end
            bars.append(_make_bar(task, vehicle, vehicle.id, at_minutes(display_date, start),
                                  at_minutes(display_date, end)))

    bars.sort(key=lambda b: b.start)
    return bars


def timeline_window(bars: Sequence[GanttBar], display_date: date) -> tuple[datetime, datetime]:
    """Visible range: whole half hours around the bars, 06:00 at the
    earliest and 18:00 at the latest end floor."""
    midnight = at_minutes(display_date, 0)
    if not bars:
        return at_minutes(display_date, 8 * 60), at_minutes(display_date, 17 * 60 + 30)

    earliest = min(b.start for b in bars)
    latest = max(b.end for b in bars)

    start = earliest.replace(minute=0 if earliest.minute < 30 else 30, second=0, microsecond=0)
    start = max(start, midnight + timedelta(minutes=EARLIEST_START))

    end = latest.replace(minute=0, second=0, microsecond=0)
    end += timedelta(minutes=60 if latest.minute > 30 else 30)
    end = max(end, midnight + timedelta(minutes=LATEST_END_FLOOR))
    return start, end


def cell_width_for(window: tuple[datetime, datetime], viewport_width: int | None = None,
                   zoom: float = 1.0, cell_minutes: int = 30) -> float:
    """Width of one time cell; at least 60px so labels stay readable."""
    intervals = max(1, math.ceil((window[1] - window[0]).total_seconds() / 60 / cell_minutes))
    base = 60 if not viewport_width else max(60, viewport_width // intervals)
    return base * zoom


def layout_bars(bars: Sequence[GanttBar], window_start: datetime, cell_width: float,
                cell_minutes: int = 30) -> list[dict]:
    px_per_minute = cell_width / cell_minutes
    min_width = max(cell_width * 0.8, MIN_BAR_WIDTH)
    positions = []
    for bar in bars:
        offset = (bar.start - window_start).total_seconds() / 60
        positions.append({
            "id": bar.id,
            "vehicle_id": bar.vehicle_id,
            "left": round(max(0.0, offset * px_per_minute), 2),
            "width": round(max(bar.duration * px_per_minute, min_width), 2),
        })
    return positions


def time_ticks(window: tuple[datetime, datetime], cell_minutes: int = 30) -> list[dict]:
    ticks = []
    current, end = window
    while current <= end:
        ticks.append({
            "time": current.isoformat(),
            "label": current.strftime("%I:%M %p").lstrip("0"),
            "is_full_hour": current.minute == 0,
        })
        current += timedelta(minutes=cell_minutes)
    return ticks


def filter_bars(bars: Iterable[GanttBar], location: str | None = None, status: str | None = None,
                vehicle_id: str | None = None, search: str | None = None) -> list[GanttBar]:
    result = []
    for bar in bars:
        if location and location != "All" and bar.location != location:
            continue
        if status and status != "All" and bar.status != status:
            continue
        if vehicle_id and bar.vehicle_id != vehicle_id:
            continue
        if search and search.lower() not in bar.name.lower():
            continue
        result.append(bar)
    return result


def group_bars(bars: Iterable[GanttBar], group_by: str) -> dict[str, list[GanttBar]]:
    groups: dict[str, list[GanttBar]] = defaultdict(list)
    for bar in bars:
        if group_by == "vehicle":
            key = bar.vehicle_id or SHARED_GROUP
        elif group_by == "location":
            key = bar.location or "General"
        elif group_by == "category":
            key = bar.category or "Other"
        else:
            key = "All"
        groups[key].append(bar)
    return dict(groups)


def day_stats(vehicles: Iterable[Any], bars: Sequence[GanttBar], day: int) -> dict:
    day_vehicles = [v for v in vehicles if v.day == day]
    total = len(bars)
    completed = sum(1 for b in bars if b.status == "Completed")
    return {
        "total_vehicles": len(day_vehicles),
        "total_tasks": total,
        "completed_tasks": completed,
        "in_progress_tasks": sum(1 for b in bars if b.status == "In Progress"),
        "pending_tasks": sum(1 for b in bars if b.status == "Pending"),
        "progress": round(completed / total * 100) if total else 0,
        "locations": sorted({v.location for v in day_vehicles}),
        "time_range": {
            "start": bars[0].start.isoformat() if bars else None,
            "end": max(b.end for b in bars).isoformat() if bars else None,
        },
    }


def available_days(vehicles: Iterable[Any]) -> list[int]:
    return sorted({v.day for v in vehicles})
