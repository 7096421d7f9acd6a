from typing import Literal

from fastapi import APIRouter, Query

from app.config import settings
from app.database import async_session
from app.services.repository import get_project_settings, load_context
from app.services.timeline import (
    available_days, build_day_timeline, cell_width_for, day_stats, filter_bars, group_bars, layout_bars,
    time_ticks, timeline_window,
)
from app.utils.exceptions import AppException
from app.utils.response import success_response
from app.utils.timeparse import date_for_day

router = APIRouter(prefix="/gantt", tags=["gantt"])


@router.get("/days")
async def list_days():
    async with async_session() as session:
        context = await load_context(session)
        project = await get_project_settings(session)
        start = project.project_start_date

    data = [
        {"day": day, "date": date_for_day(start, day).isoformat(),
         "vehicles": sum(1 for v in context.vehicles if v.day == day)}
        for day in available_days(context.vehicles)
    ]
    return success_response(data=data)


@router.get("/day/{day}")
async def get_day_timeline(
    day: int,
    location: str | None = None,
    status: str | None = None,
    vehicle_id: str | None = None,
    search: str | None = None,
    group_by: Literal["none", "vehicle", "location", "category"] = "vehicle",
    viewport_width: int | None = Query(default=None, gt=0),
    zoom: float = Query(default=1.0, gt=0, le=4),
):
    if not 1 <= day <= settings.project_days:
        raise AppException(f"Day must be between 1 and {settings.project_days}", status_code=422)

    async with async_session() as session:
        context = await load_context(session)
        project = await get_project_settings(session)
        start = project.project_start_date

    display_date = date_for_day(start, day)
    all_bars = build_day_timeline(context.vehicles, context.tasks, start, day)
    bars = filter_bars(all_bars, location=location, status=status, vehicle_id=vehicle_id, search=search)

    cell_minutes = settings.timeline_cell_minutes
    window = timeline_window(bars, display_date)
    cell_width = cell_width_for(window, viewport_width, zoom, cell_minutes)

    data = {
        "day": day,
        "date": display_date.isoformat(),
        "window": {"start": window[0].isoformat(), "end": window[1].isoformat()},
        "cell_minutes": cell_minutes,
        "cell_width": cell_width,
        "ticks": time_ticks(window, cell_minutes),
        "bars": [b.to_dict() for b in bars],
        "layout": layout_bars(bars, window[0], cell_width, cell_minutes),
        "groups": {key: [b.id for b in members] for key, members in group_bars(bars, group_by).items()},
        "stats": day_stats(context.vehicles, all_bars, day),
    }
    return success_response(data=data)
