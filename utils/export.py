import csv
import io
from typing import List
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment
from sqlalchemy.orm import Session
from database.models import Event, Registration
from services.errors import EventNotFound
from services.registration_service import list_event_registrations
from utils.timezone import format_utc_datetime, format_event_date, format_event_time

HEADERS = ["ID", "Student ID", "Name", "Email", "Registered at"]


def _load(db: Session, event_id: int):
    event = db.get(Event, event_id)
    if not event:
        raise EventNotFound(event_id=event_id)
    return event, list_event_registrations(db, event_id)


def _row(reg: Registration) -> List:
    student = reg.student
    return [
        reg.id,
        reg.student_id,
        student.full_name if student else "",
        student.email if student else "",
        format_utc_datetime(reg.registered_at),
    ]


def export_filename(event: Event, extension: str) -> str:
    slug = "".join(ch if ch.isalnum() else "_" for ch in event.title.lower()).strip("_") or "event"
    return f"registrations_{event.id}_{slug[:40]}.{extension}"


def export_registrations_to_csv(db: Session, event_id: int) -> str:
    """Registrants of an event as CSV"""
    _, registrations = _load(db, event_id)

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(HEADERS)
    for reg in registrations:
        writer.writerow(_row(reg))

    return output.getvalue()


def export_registrations_to_excel(db: Session, event_id: int) -> bytes:
    """Registrants of an event as an Excel workbook"""
    event, registrations = _load(db, event_id)

    wb = Workbook()
    ws = wb.active
    ws.title = "Registrations"

    # Event summary above the table
    ws.append([event.title])
    ws.append([
        f"{format_event_date(event.event_date)} {format_event_time(event.event_time)}",
        event.venue or "TBA",
        f"{event.registered_count}/{event.capacity} seats taken",
    ])
    ws["A1"].font = Font(bold=True, size=14)
    ws.append([])

    ws.append(HEADERS)
    header_row = ws.max_row
    for cell in ws[header_row]:
        cell.font = Font(bold=True)
        cell.alignment = Alignment(horizontal="center")

    for reg in registrations:
        ws.append(_row(reg))

    # Column widths from the table part only
    for column in ws.iter_cols(min_row=header_row):
        max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
        ws.column_dimensions[column[0].column_letter].width = min(max_length + 2, 50)

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()
