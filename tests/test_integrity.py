from types import SimpleNamespace

from app.services.integrity import run_integrity_checks


def _vehicle(vid, day=1, sensors=1, tanks=1):
    return SimpleNamespace(id=vid, day=day, fuel_sensors=sensors, fuel_tanks=tanks)


def _task(tid, vehicles=("V001",), assignees=("Dawit Mekonnen",), start=None, end=None):
    return SimpleNamespace(id=tid, vehicle_ids=list(vehicles), assignees=list(assignees),
                           start_time=start, end_time=end)


TEAM = [SimpleNamespace(name="Dawit Mekonnen")]


def test_empty_data_passes():
    assert run_integrity_checks([], [], []) == {"passed": 1, "failed": 0, "issues": []}


def test_clean_data_passes_every_check():
    report = run_integrity_checks([_task("T1", start="09:00", end="10:00")], [_vehicle("V001")], TEAM)
    assert report == {"passed": 6, "failed": 0, "issues": []}


def test_problems_are_reported():
    tasks = [
        _task("T1", vehicles=["V404"]),
        _task("T1", assignees=["Ghost"]),
        _task("T2", start="11:00", end="10:00"),
    ]
    vehicles = [_vehicle("V001", day=20), _vehicle("V002", sensors=3, tanks=2)]
    report = run_integrity_checks(tasks, vehicles, TEAM, project_days=14)

    assert report["passed"] == 0
    assert report["failed"] == 6
    assert report["issues"] == [
        "1 tasks have invalid vehicle references",
        "1 tasks have invalid assignee references",
        "1 duplicate task IDs found",
        "1 tasks have invalid time ranges",
        "1 vehicles are scheduled outside days 1-14",
        "1 vehicles have more fuel sensors than fuel tanks",
    ]
