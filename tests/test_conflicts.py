from types import SimpleNamespace

from app.schemas.task import TaskDraft
from app.services.conflicts import detect_conflicts, overlaps, resolve_conflicts


def _task(task_id, start, end, vehicle="V001", assignee="Dawit Mekonnen", **extra):
    return TaskDraft(id=task_id, name=f"Task {task_id}", vehicle_ids=[vehicle], assignees=[assignee],
                     start_time=start, end_time=end, start_date=extra.pop("start_date", "2026-03-02"), **extra)


TEAM = [SimpleNamespace(name="Dawit Mekonnen"), SimpleNamespace(name="Martha Hailu")]


def test_overlap_is_half_open():
    assert overlaps(_task("A", "09:00", "10:00"), _task("B", "09:30", "10:30"))
    assert not overlaps(_task("A", "09:00", "10:00"), _task("B", "10:00", "11:00"))


def test_overlap_requires_same_date():
    assert not overlaps(_task("A", "09:00", "10:00"), _task("B", "09:00", "10:00", start_date="2026-03-03"))
    assert overlaps(_task("A", "09:00", "10:00"), _task("B", "09:00", "10:00", start_date=None))


def test_untimed_tasks_never_overlap():
    assert not overlaps(_task("A", None, None), _task("B", "09:00", "10:00"))


def test_time_and_resource_conflicts():
    report = detect_conflicts([_task("A", "09:00", "10:00"), _task("B", "09:30", "10:30")])

    by_id = {c.id: c for c in report.conflicts}
    assert set(by_id) == {"time-conflict-0-1", "resource-conflict-0-1"}

    time_conflict = by_id["time-conflict-0-1"]
    assert time_conflict.severity == "high"
    assert time_conflict.conflicting_tasks == ["A", "B"]
    assert time_conflict.suggested_resolution.action == "reschedule"
    assert time_conflict.suggested_resolution.task_id == "B"
    assert time_conflict.suggested_resolution.new_start_time == "10:00"

    assert by_id["resource-conflict-0-1"].severity == "medium"
    assert report.suggestions == ["2 conflict(s) can be automatically resolved"]


def test_different_vehicle_and_assignee_do_not_conflict():
    report = detect_conflicts([
        _task("A", "09:00", "10:00"),
        _task("B", "09:00", "10:00", vehicle="V002", assignee="Martha Hailu"),
    ])
    assert report.conflicts == []
    assert report.suggestions == ["No conflicts detected. The schedule is clear."]


def test_missing_dependency_is_critical():
    report = detect_conflicts([_task("A", "09:00", "10:00", dependencies=["Z"])])
    conflict = report.conflicts[0]
    assert conflict.id == "missing-dependency-A-Z"
    assert conflict.severity == "critical"
    assert conflict.auto_resolvable is False
    assert report.critical_count == 1
    assert "1 critical conflict(s) require manual attention" in report.suggestions


def test_dependency_timing():
    first = _task("A", "09:00", "10:00", end_date="2026-03-04")
    second = _task("B", "09:00", "10:00", vehicle="V002", assignee="Martha Hailu",
                   start_date="2026-03-03", dependencies=["A"])
    report = detect_conflicts([first, second])

    assert [c.id for c in report.conflicts] == ["dependency-timing-B-A"]
    assert report.conflicts[0].suggested_resolution.new_start_date == "2026-03-05"


def test_resolve_reschedules_keeping_length():
    tasks = [_task("A", "09:00", "10:00"), _task("B", "09:30", "11:00", assignee="Martha Hailu")]
    report = detect_conflicts(tasks)
    resolved = resolve_conflicts(tasks, report.conflicts, TEAM)

    moved = resolved[1]
    assert (moved.start_time, moved.end_time) == ("10:00", "11:30")
    assert tasks[1].start_time == "09:30"
    assert detect_conflicts(resolved).conflicts == []


def test_resolve_reassigns_to_free_member():
    tasks = [
        _task("A", "09:00", "10:00"),
        _task("B", "09:00", "10:00", vehicle="V002"),
    ]
    report = detect_conflicts(tasks)
    resolved = resolve_conflicts(tasks, report.conflicts, TEAM)
    assert resolved[1].assignees == ["Martha Hailu"]


def test_resolve_moves_dependent_dates():
    first = _task("A", "09:00", "10:00", end_date="2026-03-04")
    second = _task("B", "09:00", "10:00", vehicle="V002", assignee="Martha Hailu",
                   start_date="2026-03-03", end_date="2026-03-04", dependencies=["A"])
    resolved = resolve_conflicts([first, second], detect_conflicts([first, second]).conflicts, TEAM)
    assert (resolved[1].start_date, resolved[1].end_date) == ("2026-03-05", "2026-03-06")
