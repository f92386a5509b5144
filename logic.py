import calendar
import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from enum import Enum

STANDARD_DAY_HOURS = 8
LUNCH_BREAK_HOURS = 1
LUNCH_CUTOFF_HOUR = 12
DINNER_MEAL_HOURS = 0.5

DEFAULT_CHECKIN = "09:00"
DEFAULT_CHECKOUT = "17:00"
DEFAULT_ANNUAL_LEAVE_HOURS = 8

MINUTES_PER_DAY = 24 * 60


class WorkType(str, Enum):
    OFFICE = "office"
    REMOTE = "remote"
    ANNUAL_LEAVE = "annual-leave"


def normalize_time_str(t_str):
    """
    Bereinigt Benutzereingaben wie '8', '830', '8.30' zu 'HH:MM'.
    Gibt None zurück, wenn sich daraus keine gültige Uhrzeit machen lässt.
    """
    if not t_str: return None
    t_str = str(t_str).strip().replace('.', ':')

    try:
        h, m = 0, 0
        if ':' in t_str:
            parts = t_str.split(':')
            h, m = int(parts[0]), int(parts[1])
        elif len(t_str) == 4:
            h, m = int(t_str[:2]), int(t_str[2:])
        elif len(t_str) == 3:
            h, m = int(t_str[:1]), int(t_str[1:])
        elif len(t_str) <= 2:
            h, m = int(t_str), 0
        else:
            return None

        if h < 0 or m < 0 or h > 23 or m > 59: return None
        return f"{h:02d}:{m:02d}"
    except ValueError:
        return None


def _split_time(t_str):
    h, m = t_str.split(':')
    return int(h), int(m)


def calculate_work_hours(work_type, checkin_time=None, checkout_time=None,
                         annual_leave_hours=None, hourly_leave=None,
                         outside_time=0, dinner_meal=None):
    """
    Berechnet die Arbeitszeit eines Tages.

    Urlaubstage zählen mit den angegebenen Stunden, ohne Uhrzeit-Rechnung.
    Büro/Remote: Differenz Ein-/Ausstempeln (eine Mitternacht wird
    übersprungen), abzüglich 1h Mittagspause bei Arbeitsbeginn vor 12 Uhr,
    Außer-Haus-Zeit und Abendessen. Die Arbeitszeit wird bei 0 gekappt,
    erst danach kommt der Stundenurlaub oben drauf.
    """
    work_type = WorkType(work_type)
    if checkin_time is None: checkin_time = DEFAULT_CHECKIN
    if checkout_time is None: checkout_time = DEFAULT_CHECKOUT
    if annual_leave_hours is None: annual_leave_hours = DEFAULT_ANNUAL_LEAVE_HOURS
    if hourly_leave is None: hourly_leave = 0
    if outside_time is None: outside_time = 0
    if dinner_meal is None: dinner_meal = False

    if work_type is WorkType.ANNUAL_LEAVE:
        return {
            "raw_hours": float(annual_leave_hours),
            "break_deduction": 0.0,
            "outside_time_hours": 0.0,
            "dinner_meal_deduction": 0.0,
            "work_hours": 0.0,
            "total_hours": float(annual_leave_hours),
        }

    # WorkType.OFFICE / WorkType.REMOTE
    checkin_h, checkin_m = _split_time(checkin_time)
    checkout_h, checkout_m = _split_time(checkout_time)

    checkin_minutes = checkin_h * 60 + checkin_m
    checkout_minutes = checkout_h * 60 + checkout_m

    if checkout_minutes <= checkin_minutes:
        # Nachtschicht: genau ein Tageswechsel
        checkout_minutes += MINUTES_PER_DAY

    raw_hours = (checkout_minutes - checkin_minutes) / 60

    # Stunde vor dem Rollover, nicht die verschobene
    break_deduction = float(LUNCH_BREAK_HOURS) if checkin_h < LUNCH_CUTOFF_HOUR else 0.0
    outside_time_hours = outside_time / 60
    dinner_meal_deduction = DINNER_MEAL_HOURS if dinner_meal else 0.0

    work_hours = max(0.0, raw_hours - break_deduction - outside_time_hours - dinner_meal_deduction)
    total_hours = work_hours + hourly_leave

    return {
        "raw_hours": raw_hours,
        "break_deduction": break_deduction,
        "outside_time_hours": outside_time_hours,
        "dinner_meal_deduction": dinner_meal_deduction,
        "work_hours": work_hours,
        "total_hours": float(total_hours),
    }


@dataclass(frozen=True)
class DayEntry:
    """
    Ein Tageseintrag. Die berechneten Felder werden immer aus den
    Eingaben abgeleitet und lassen sich nicht direkt setzen.
    """
    work_type: WorkType
    checkin_time: str = None
    checkout_time: str = None
    annual_leave_hours: float = None
    hourly_leave: float = None
    outside_time: int = None
    dinner_meal: bool = None

    raw_hours: float = field(init=False)
    break_deduction: float = field(init=False)
    outside_time_hours: float = field(init=False)
    dinner_meal_deduction: float = field(init=False)
    total_hours: float = field(init=False)

    def __post_init__(self):
        work_type = WorkType(self.work_type)
        object.__setattr__(self, "work_type", work_type)

        if work_type is WorkType.ANNUAL_LEAVE:
            object.__setattr__(self, "checkin_time", None)
            object.__setattr__(self, "checkout_time", None)
            object.__setattr__(self, "hourly_leave", 0)
            if self.annual_leave_hours is None:
                object.__setattr__(self, "annual_leave_hours", DEFAULT_ANNUAL_LEAVE_HOURS)
        else:
            # Urlaubsstunden gibt es nur am Urlaubstag
            object.__setattr__(self, "annual_leave_hours", None)

        if self.hourly_leave is None: object.__setattr__(self, "hourly_leave", 0)
        if self.outside_time is None: object.__setattr__(self, "outside_time", 0)
        if self.dinner_meal is None: object.__setattr__(self, "dinner_meal", False)

        result = calculate_work_hours(
            work_type,
            checkin_time=self.checkin_time,
            checkout_time=self.checkout_time,
            annual_leave_hours=self.annual_leave_hours,
            hourly_leave=self.hourly_leave,
            outside_time=self.outside_time,
            dinner_meal=self.dinner_meal,
        )
        for key in ("raw_hours", "break_deduction", "outside_time_hours",
                    "dinner_meal_deduction", "total_hours"):
            object.__setattr__(self, key, result[key])

    def replace(self, **changes):
        return replace(self, **changes)

    def to_dict(self):
        return {
            "workType": self.work_type.value,
            "checkinTime": self.checkin_time,
            "checkoutTime": self.checkout_time,
            "annualLeaveHours": self.annual_leave_hours,
            "hourlyLeave": self.hourly_leave,
            "outsideTime": self.outside_time,
            "dinnerMeal": self.dinner_meal,
            "rawHours": self.raw_hours,
            "breakDeduction": self.break_deduction,
            "outsideTimeHours": self.outside_time_hours,
            "dinnerMealDeduction": self.dinner_meal_deduction,
            "totalHours": self.total_hours,
        }


# --- DATUMS-HELPER ---

def days_in_month(year, month):
    return calendar.monthrange(year, month)[1]


def format_date_string(date_obj):
    return date_obj.strftime("%Y-%m-%d")


def parse_date_string(date_str):
    return datetime.strptime(date_str, "%Y-%m-%d").date()


def is_weekend(date_obj):
    return date_obj.weekday() >= 5


def iter_month_dates(year, month):
    for day in range(1, days_in_month(year, month) + 1):
        yield date(year, month, day)


def get_month_days(year, month):
    """
    Kalenderraster mit 6 Wochen à 7 Tagen (Sonntag zuerst), aufgefüllt
    mit Tagen aus Vor- und Folgemonat.
    """
    first = date(year, month, 1)
    # weekday(): Montag=0 ... Sonntag=6 -> Sonntag als Spalte 0
    lead = (first.weekday() + 1) % 7

    days = []
    for i in range(lead, 0, -1):
        days.append({"date": first - timedelta(days=i), "current_month": False})
    for d in iter_month_dates(year, month):
        days.append({"date": d, "current_month": True})

    last = days[-1]["date"]
    for i in range(1, 42 - len(days) + 1):
        days.append({"date": last + timedelta(days=i), "current_month": False})
    return days


# --- MONATSSTATISTIK ---

def _percentage(part, whole):
    # Halbe Prozente aufrunden (12.5 -> 13), ganzzahlig gerechnet
    return (part * 200 + whole) // (2 * whole) if whole else 0


def calculate_monthly_stats(year, month, entries_by_date):
    """
    Rechnet die Einträge eines Monats zusammen. Nur Werktage (Mo-Fr)
    werden berücksichtigt; Einträge am Wochenende fallen raus.
    """
    business_days, work_days = 0, 0
    office_days, remote_days, leave_days = 0, 0, 0
    office_hours, remote_hours, annual_leave_hours = 0.0, 0.0, 0.0

    for date_obj in iter_month_dates(year, month):
        if is_weekend(date_obj):
            continue
        business_days += 1

        entry = entries_by_date.get(format_date_string(date_obj))
        if entry is None:
            continue

        work_type = WorkType(entry.work_type)
        if work_type is WorkType.OFFICE:
            office_hours += entry.total_hours
            office_days += 1
        elif work_type is WorkType.REMOTE:
            remote_hours += entry.total_hours
            remote_days += 1
        elif work_type is WorkType.ANNUAL_LEAVE:
            annual_leave_hours += entry.total_hours
            leave_days += 1
        work_days += 1

    attended_days = office_days + remote_days
    total_hours = office_hours + remote_hours
    standard_hours = attended_days * STANDARD_DAY_HOURS

    office_percentage = _percentage(office_days, attended_days)
    # Rest statt zweiter Rundung, sonst ergeben 12.5/87.5 zusammen 101
    remote_percentage = 100 - office_percentage if attended_days else 0

    return {
        "business_days": business_days,
        "work_days": work_days,
        "office_days": office_days,
        "remote_days": remote_days,
        "leave_days": leave_days,
        "office_hours": office_hours,
        "remote_hours": remote_hours,
        "annual_leave_hours": annual_leave_hours,
        "total_hours": total_hours,
        "standard_hours": standard_hours,
        "office_overwork": office_hours - office_days * STANDARD_DAY_HOURS,
        "remote_overwork": remote_hours - remote_days * STANDARD_DAY_HOURS,
        "total_overwork": total_hours - standard_hours,
        "average_office_hours": office_hours / office_days if office_days else 0,
        "average_remote_hours": remote_hours / remote_days if remote_days else 0,
        "office_percentage": office_percentage,
        "remote_percentage": remote_percentage,
        "leave_percentage": _percentage(leave_days, attended_days + leave_days),
    }


# --- ANZEIGE-FORMATE ---

def parse_time_to_hours(t_str):
    h, m = _split_time(t_str)
    return h + m / 60


def format_hours_to_time(hours):
    whole = math.floor(hours)
    minutes = round((hours - whole) * 60)
    if minutes == 60:
        whole, minutes = whole + 1, 0
    return f"{whole:02d}:{minutes:02d}"


def format_time_to_12_hour(t_str):
    if not t_str: return ""
    h, m = _split_time(t_str)
    suffix = "PM" if h >= 12 else "AM"
    return f"{h % 12 or 12}:{m:02d} {suffix}"


def format_hours_with_label(hours):
    """Stunden als 'H:MM', z.B. 7.5 -> '7:30'."""
    if hours == 0: return "0:00"
    whole = math.floor(hours)
    minutes = round((hours - whole) * 60)
    if minutes == 60:
        return f"{whole + 1}:00"
    return f"{whole}:{minutes:02d}"


def format_signed_hours(hours):
    sign = "+" if hours >= 0 else "-"
    return sign + format_hours_with_label(abs(hours))
