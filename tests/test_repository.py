import pytest
from logic import DayEntry
from repository import InMemoryEntryRepository, SqlEntryRepository, hours_to_minutes


@pytest.fixture(params=["memory", "sql"])
def repo(request):
    """Beide Implementierungen müssen sich gleich verhalten."""
    if request.param == "memory":
        yield InMemoryEntryRepository()
        return

    flask_app = request.getfixturevalue("flask_app")
    with flask_app.app_context():
        yield SqlEntryRepository()


def test_hours_to_minutes():
    assert hours_to_minutes(7.5) == 450
    assert hours_to_minutes(1 / 3) == 20
    assert hours_to_minutes(0) == 0

def test_set_and_get(repo):
    entry = DayEntry("office", "09:00", "18:00", outside_time=30)
    repo.set(1, "2024-01-15", entry)

    loaded = repo.get(1, "2024-01-15")
    assert loaded == entry
    assert loaded.total_hours == 7.5

def test_get_missing(repo):
    assert repo.get(1, "2024-01-15") is None

def test_set_overwrites_whole_entry(repo):
    repo.set(1, "2024-01-15", DayEntry("office", "09:00", "18:00", dinner_meal=True))
    repo.set(1, "2024-01-15", DayEntry("annual-leave", annual_leave_hours=4))

    loaded = repo.get(1, "2024-01-15")
    assert loaded.work_type.value == "annual-leave"
    assert loaded.dinner_meal is False
    assert loaded.total_hours == 4

def test_entries_are_separated_per_user(repo):
    repo.set(1, "2024-01-15", DayEntry("office", "09:00", "18:00"))
    repo.set(2, "2024-01-15", DayEntry("remote", "10:00", "14:00"))

    assert repo.get(1, "2024-01-15").work_type.value == "office"
    assert repo.get(2, "2024-01-15").work_type.value == "remote"
    assert repo.delete(2, "2024-01-15") is True
    assert repo.get(1, "2024-01-15") is not None

def test_delete(repo):
    repo.set(1, "2024-01-15", DayEntry("remote", "09:00", "17:00"))
    assert repo.delete(1, "2024-01-15") is True
    assert repo.get(1, "2024-01-15") is None
    assert repo.delete(1, "2024-01-15") is False

def test_list_by_month(repo):
    repo.set(1, "2024-01-31", DayEntry("office", "09:00", "17:00"))
    repo.set(1, "2024-02-01", DayEntry("office", "09:00", "17:00"))
    repo.set(1, "2024-02-29", DayEntry("remote", "09:00", "17:00"))
    repo.set(1, "2024-03-01", DayEntry("remote", "09:00", "17:00"))
    repo.set(2, "2024-02-10", DayEntry("remote", "09:00", "17:00"))

    entries = repo.list_by_month(1, 2024, 2)
    assert sorted(entries) == ["2024-02-01", "2024-02-29"]
    assert repo.list_by_month(3, 2024, 2) == {}

def test_delete_older_than(repo):
    repo.set(1, "2023-12-31", DayEntry("office", "09:00", "17:00"))
    repo.set(2, "2023-06-01", DayEntry("office", "09:00", "17:00"))
    repo.set(1, "2024-01-01", DayEntry("office", "09:00", "17:00"))

    assert repo.delete_older_than(1, "2024-01-01") == 1
    assert repo.get(1, "2023-12-31") is None
    assert repo.get(1, "2024-01-01") is not None
    # andere Benutzer bleiben unberührt
    assert repo.get(2, "2023-06-01") is not None

def test_sql_stores_hours_as_minutes(flask_app):
    from models import TimeEntry

    with flask_app.app_context():
        SqlEntryRepository().set(1, "2024-01-15", DayEntry("office", "09:00", "18:00", outside_time=30))
        row = TimeEntry.query.filter_by(user_id=1, date="2024-01-15").one()
        assert row.raw_hours == 540
        assert row.break_deduction == 60
        assert row.total_hours == 450
        assert row.work_type == "office"
