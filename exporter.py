from io import BytesIO

import openpyxl
from openpyxl.utils import get_column_letter

from logic import WorkType, format_hours_with_label, format_signed_hours

WORK_TYPE_LABELS = {
    WorkType.OFFICE: "Office",
    WorkType.REMOTE: "Remote",
    WorkType.ANNUAL_LEAVE: "Annual leave",
}

ENTRY_COLUMNS = [
    ("Date", 15),
    ("Work type", 15),
    ("Check-in", 12),
    ("Check-out", 12),
    ("Annual leave (h)", 16),
    ("Hourly leave (h)", 16),
    ("Outside time (min)", 18),
    ("Dinner meal", 12),
    ("Total hours", 12),
]


def export_filename(year, month):
    return f"time-entries-{year}-{month}.xlsx"


def build_month_workbook(year, month, entries_by_date, stats):
    """
    Baut die Excel-Mappe für einen Monat: Einzelbuchungen plus Zusammenfassung.
    """
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Time Entries"
    ws.append([title for title, _ in ENTRY_COLUMNS])
    for idx, (_, width) in enumerate(ENTRY_COLUMNS, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width

    for date_str in sorted(entries_by_date):
        e = entries_by_date[date_str]
        ws.append([
            date_str,
            WORK_TYPE_LABELS[e.work_type],
            e.checkin_time or "-",
            e.checkout_time or "-",
            e.annual_leave_hours if e.work_type is WorkType.ANNUAL_LEAVE else 0,
            e.hourly_leave or 0,
            e.outside_time or 0,
            "Yes" if e.dinner_meal else "No",
            round(e.total_hours, 2),
        ])

    ws2 = wb.create_sheet("Summary")
    ws2.column_dimensions["A"].width = 24
    ws2.column_dimensions["B"].width = 12
    ws2.append(["Month", f"{year}-{month:02d}"])
    ws2.append(["Business days", stats["business_days"]])
    ws2.append(["Office days", stats["office_days"]])
    ws2.append(["Remote days", stats["remote_days"]])
    ws2.append(["Leave days", stats["leave_days"]])
    ws2.append(["Office hours", format_hours_with_label(stats["office_hours"])])
    ws2.append(["Remote hours", format_hours_with_label(stats["remote_hours"])])
    ws2.append(["Annual leave hours", format_hours_with_label(stats["annual_leave_hours"])])
    ws2.append(["Total hours", format_hours_with_label(stats["total_hours"])])
    ws2.append(["Standard hours", format_hours_with_label(stats["standard_hours"])])
    ws2.append(["Office balance", format_signed_hours(stats["office_overwork"])])
    ws2.append(["Remote balance", format_signed_hours(stats["remote_overwork"])])
    ws2.append(["Total balance", format_signed_hours(stats["total_overwork"])])
    ws2.append(["Avg. office day", format_hours_with_label(stats["average_office_hours"])])
    ws2.append(["Avg. remote day", format_hours_with_label(stats["average_remote_hours"])])
    ws2.append(["Office share (%)", stats["office_percentage"]])
    ws2.append(["Remote share (%)", stats["remote_percentage"]])
    ws2.append(["Leave share (%)", stats["leave_percentage"]])
    return wb


def workbook_to_bytes(wb):
    buf = BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf
