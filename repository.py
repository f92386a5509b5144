from logic import DayEntry, days_in_month
from models import db, TimeEntry


def hours_to_minutes(hours):
    return int(round(hours * 60))


def _month_range(year, month):
    return f"{year}-{month:02d}-01", f"{year}-{month:02d}-{days_in_month(year, month):02d}"


class EntryRepository:
    """
    Schnittstelle für die Tageseinträge je Benutzer und Datum.
    `set` überschreibt den kompletten Eintrag des Tages.
    """

    def get(self, user_id, date_str):
        raise NotImplementedError

    def set(self, user_id, date_str, entry):
        raise NotImplementedError

    def delete(self, user_id, date_str):
        raise NotImplementedError

    def list_by_month(self, user_id, year, month):
        raise NotImplementedError

    def delete_older_than(self, user_id, date_str):
        raise NotImplementedError


class InMemoryEntryRepository(EntryRepository):
    def __init__(self):
        self._entries = {}

    def get(self, user_id, date_str):
        return self._entries.get(user_id, {}).get(date_str)

    def set(self, user_id, date_str, entry):
        self._entries.setdefault(user_id, {})[date_str] = entry

    def delete(self, user_id, date_str):
        return self._entries.get(user_id, {}).pop(date_str, None) is not None

    def list_by_month(self, user_id, year, month):
        first, last = _month_range(year, month)
        return {d: e for d, e in self._entries.get(user_id, {}).items() if first <= d <= last}

    def delete_older_than(self, user_id, date_str):
        entries = self._entries.get(user_id, {})
        old = [d for d in entries if d < date_str]
        for d in old:
            del entries[d]
        return len(old)


def row_to_entry(row):
    """
    DB-Zeile -> DayEntry. Die berechneten Felder entstehen dabei neu aus
    den Eingaben, die Minuten-Spalten werden nicht zurückgelesen.
    """
    return DayEntry(
        work_type=row.work_type,
        checkin_time=row.checkin_time,
        checkout_time=row.checkout_time,
        annual_leave_hours=row.annual_leave_hours,
        hourly_leave=row.hourly_leave or 0,
        outside_time=row.outside_time or 0,
        dinner_meal=bool(row.dinner_meal),
    )


def apply_entry_to_row(row, entry):
    row.work_type = entry.work_type.value
    row.checkin_time = entry.checkin_time
    row.checkout_time = entry.checkout_time
    row.annual_leave_hours = entry.annual_leave_hours
    row.hourly_leave = entry.hourly_leave
    row.outside_time = entry.outside_time
    row.dinner_meal = entry.dinner_meal
    row.raw_hours = hours_to_minutes(entry.raw_hours)
    row.break_deduction = hours_to_minutes(entry.break_deduction)
    row.total_hours = hours_to_minutes(entry.total_hours)


class SqlEntryRepository(EntryRepository):
    """
    Ablage in der SQLite-DB über Flask-SQLAlchemy. Benötigt einen App-Kontext.
    """

    def _row(self, user_id, date_str):
        return TimeEntry.query.filter_by(user_id=user_id, date=date_str).first()

    def get(self, user_id, date_str):
        row = self._row(user_id, date_str)
        return row_to_entry(row) if row else None

    def set(self, user_id, date_str, entry):
        row = self._row(user_id, date_str)
        if not row:
            row = TimeEntry(user_id=user_id, date=date_str)
            db.session.add(row)
        apply_entry_to_row(row, entry)
        db.session.commit()

    def delete(self, user_id, date_str):
        row = self._row(user_id, date_str)
        if not row:
            return False
        db.session.delete(row)
        db.session.commit()
        return True

    def list_by_month(self, user_id, year, month):
        first, last = _month_range(year, month)
        rows = TimeEntry.query.filter(
            TimeEntry.user_id == user_id,
            TimeEntry.date >= first,
            TimeEntry.date <= last
        ).order_by(TimeEntry.date.asc()).all()
        return {r.date: row_to_entry(r) for r in rows}

    def delete_older_than(self, user_id, date_str):
        count = TimeEntry.query.filter(
            TimeEntry.user_id == user_id,
            TimeEntry.date < date_str
        ).delete()
        db.session.commit()
        return count
