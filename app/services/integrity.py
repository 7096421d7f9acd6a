"""Cross-table consistency checks over tasks, vehicles and team members."""
import logging
from collections import Counter
from typing import Any, Sequence

from app.services.validation import as_list
from app.utils.timeparse import parse_hhmm

logger = logging.getLogger(__name__)


def _check(passed: bool, issue: str, report: dict) -> None:
    if passed:
        report["passed"] += 1
    else:
        report["failed"] += 1
        report["issues"].append(issue)


def run_integrity_checks(tasks: Sequence[Any], vehicles: Sequence[Any], team_members: Sequence[Any],
                         project_days: int = 14) -> dict:
    """Return ``{"passed", "failed", "issues"}`` for the stored data.

    A check with nothing to look at counts as passed.
    """
    report = {"passed": 0, "failed": 0, "issues": []}
    if not tasks and not vehicles and not team_members:
        report["passed"] = 1
        return report

    vehicle_ids = {v.id for v in vehicles}
    bad_vehicle_refs = [t for t in tasks if any(v not in vehicle_ids for v in as_list(t.vehicle_ids))]
    _check(not bad_vehicle_refs, f"{len(bad_vehicle_refs)} tasks have invalid vehicle references", report)

    member_names = {m.name for m in team_members}
    bad_assignees = [t for t in tasks if any(a not in member_names for a in as_list(t.assignees))]
    _check(not bad_assignees, f"{len(bad_assignees)} tasks have invalid assignee references", report)

    duplicates = sum(n - 1 for n in Counter(t.id for t in tasks).values() if n > 1)
    _check(not duplicates, f"{duplicates} duplicate task IDs found", report)

    bad_ranges = []
    for t in tasks:
        start, end = parse_hhmm(t.start_time), parse_hhmm(t.end_time)
        if start is not None and end is not None and start >= end:
            bad_ranges.append(t)
    _check(not bad_ranges, f"{len(bad_ranges)} tasks have invalid time ranges", report)

    bad_days = [v for v in vehicles if not 1 <= v.day <= project_days]
    _check(not bad_days, f"{len(bad_days)} vehicles are scheduled outside days 1-{project_days}", report)

    over_sensored = [v for v in vehicles if (v.fuel_sensors or 0) > (v.fuel_tanks or 0)]
    _check(not over_sensored, f"{len(over_sensored)} vehicles have more fuel sensors than fuel tanks", report)

    if report["failed"]:
        logger.warning("Integrity checks failed: %s", "; ".join(report["issues"]))
    return report
