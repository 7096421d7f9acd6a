"""Project end-date estimation and project phase."""
import math
from dataclasses import dataclass, field, asdict
from datetime import date, timedelta
from typing import Any, Sequence

DAYS_PER_VEHICLE = 0.8
PARALLEL_INSTALLATIONS = 3
SETUP_DAYS = 2
BUFFER_DAYS = 3
TASKS_PER_DAY = 6
DEFAULT_COMPLETION_RATE = 70
DEFAULT_QUALITY_SCORE = 80
CONSERVATIVE_FACTOR = 1.2
OPTIMISTIC_FACTOR = 0.85


@dataclass
class Estimate:
    method: str
    total_days: int
    estimated_end_date: str
    confidence: str  # low | medium | high
    details: str
    breakdown: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def _end_date(start: date, days: int) -> str:
    return (start + timedelta(days=days)).isoformat()


def estimate_by_vehicle_count(start: date, vehicles: Sequence[Any]) -> Estimate:
    count = len(vehicles)
    install_days = math.ceil(count / PARALLEL_INSTALLATIONS) * DAYS_PER_VEHICLE
    total = math.ceil(SETUP_DAYS + install_days + BUFFER_DAYS)
    return Estimate(
        method="Vehicle Count",
        total_days=total,
        estimated_end_date=_end_date(start, total),
        confidence="medium" if count else "low",
        details=f"Based on {count} vehicles with {PARALLEL_INSTALLATIONS} parallel installations",
        breakdown=[
            {"phase": "Setup & Planning", "duration": SETUP_DAYS,
             "description": "Initial project setup and preparation"},
            {"phase": "Vehicle Installations", "duration": round(install_days, 1),
             "description": f"{count} vehicles, {PARALLEL_INSTALLATIONS} parallel installations"},
            {"phase": "Testing & Buffer", "duration": BUFFER_DAYS,
             "description": "Final testing and contingency time"},
        ],
    )


def task_complexity(task: Any) -> float:
    score = 1.0
    if task.priority == "High":
        score += 0.5
    elif task.priority == "Low":
        score -= 0.2
    if task.estimated_duration:
        score += min(task.estimated_duration / 60, 2)
    if task.status == "Blocked":
        score += 0.3
    return max(score, 0.5)


def estimate_by_task_complexity(start: date, tasks: Sequence[Any]) -> Estimate:
    complexity = sum(task_complexity(t) for t in tasks)
    total = math.ceil(complexity / TASKS_PER_DAY)
    return Estimate(
        method="Task Complexity",
        total_days=total,
        estimated_end_date=_end_date(start, total),
        confidence="high" if len(tasks) > 5 else "medium",
        details=f"Based on {len(tasks)} tasks with complexity analysis",
        breakdown=[{"phase": "Task Execution", "duration": total,
                    "description": f"{len(tasks)} tasks with total complexity score of {complexity:.1f}"}],
    )


def estimate_by_team_performance(start: date, vehicles: Sequence[Any], team_members: Sequence[Any]) -> Estimate:
    """Scale the vehicle-count estimate by how far the team sits below 100%
    completion rate and quality score (floored at 50% each)."""
    if team_members:
        completion = sum(m.completion_rate or DEFAULT_COMPLETION_RATE for m in team_members) / len(team_members)
        quality = sum(m.quality_score or DEFAULT_QUALITY_SCORE for m in team_members) / len(team_members)
    else:
        completion, quality = DEFAULT_COMPLETION_RATE, DEFAULT_QUALITY_SCORE

    base = estimate_by_vehicle_count(start, vehicles)
    multiplier = (100 / max(completion, 50)) * (100 / max(quality, 50))
    total = math.ceil(base.total_days * multiplier)
    return Estimate(
        method="Team Performance",
        total_days=total,
        estimated_end_date=_end_date(start, total),
        confidence="high" if len(team_members) > 2 else "medium",
        details=f"Adjusted for team of {len(team_members)} members with {completion:.1f}% avg completion rate",
        breakdown=[{"phase": "Team-Adjusted Estimation", "duration": total,
                    "description": f"Base: {base.total_days} days, adjusted for team efficiency "
                                   f"({completion:.1f}% completion, {quality:.1f}% quality)"}],
    )


def all_estimates(start: date, vehicles: Sequence[Any], tasks: Sequence[Any],
                  team_members: Sequence[Any]) -> list[Estimate]:
    base = [
        estimate_by_vehicle_count(start, vehicles),
        estimate_by_task_complexity(start, tasks),
        estimate_by_team_performance(start, vehicles, team_members),
    ]
    longest = max(base, key=lambda e: e.total_days)
    shortest = min(base, key=lambda e: e.total_days)

    conservative_days = math.ceil(longest.total_days * CONSERVATIVE_FACTOR)
    optimistic_days = math.ceil(shortest.total_days * OPTIMISTIC_FACTOR)
    return base + [
        Estimate(
            method="Conservative",
            total_days=conservative_days,
            estimated_end_date=_end_date(start, conservative_days),
            confidence="high",
            details=f"Conservative estimate with 20% buffer based on {longest.method}",
            breakdown=[{"phase": "Conservative Estimate", "duration": conservative_days,
                        "description": f"Based on longest method ({longest.method}: "
                                       f"{longest.total_days} days) with 20% buffer"}],
        ),
        Estimate(
            method="Optimistic",
            total_days=optimistic_days,
            estimated_end_date=_end_date(start, optimistic_days),
            confidence="medium",
            details=f"Optimistic estimate assuming perfect conditions based on {shortest.method}",
            breakdown=[{"phase": "Optimistic Estimate", "duration": optimistic_days,
                        "description": f"Based on shortest method ({shortest.method}: "
                                       f"{shortest.total_days} days) with 15% reduction"}],
        ),
    ]


def recommended_estimate(estimates: Sequence[Estimate]) -> Estimate:
    ordered = sorted(estimates, key=lambda e: e.total_days)
    median = ordered[len(ordered) // 2]
    return Estimate(
        method="Recommended (Median)",
        total_days=median.total_days,
        estimated_end_date=median.estimated_end_date,
        confidence="high",
        details=f"Median of {len(ordered)} estimation methods ({median.details})",
        breakdown=list(median.breakdown),
    )


def project_phase(start: date, total_days: int, today: date | None = None) -> dict:
    """planning before the start date, active through the last project day,
    completed afterwards."""
    today = today or date.today()
    last_day = start + timedelta(days=total_days - 1)

    if today < start:
        return {"phase": "planning", "days_until_start": (start - today).days,
                "days_since_start": 0, "progress_percentage": 0}
    if today <= last_day:
        elapsed = (today - start).days
        progress = max(0, min(100, round(elapsed / total_days * 100)))
        return {"phase": "active", "days_until_start": 0,
                "days_since_start": elapsed, "progress_percentage": progress}
    return {"phase": "completed", "days_until_start": 0,
            "days_since_start": total_days, "progress_percentage": 100}
