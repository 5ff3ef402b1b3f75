"""Exporting the participants of an event as CSV or XLSX."""

from __future__ import annotations

import io
import uuid
import zipfile
from collections.abc import Iterable
from xml.sax.saxutils import escape, quoteattr

from eventhub.common import ApiError, validate_uuid
from eventhub.models import Event, EventParticipant, User
from eventhub.store import Store

CSV_CONTENT_TYPE = "text/csv; charset=utf-8"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SHEET_NAME = "Участники"
HEADER = ("ФИО", "Email")

_XML_DECL = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
_NS_MAIN = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
_NS_REL = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
_NS_PKG_REL = "http://schemas.openxmlformats.org/package/2006/relationships"
_NS_TYPES = "http://schemas.openxmlformats.org/package/2006/content-types"

_CONTENT_TYPES = (
    _XML_DECL
    + f'<Types xmlns="{_NS_TYPES}">'
    '<Default Extension="rels" '
    'ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
    '<Default Extension="xml" ContentType="application/xml"/>'
    '<Override PartName="/xl/workbook.xml" ContentType="application/'
    'vnd.openxmlformats-officedocument.spreadsheetml.sheet.main+xml"/>'
    '<Override PartName="/xl/worksheets/sheet1.xml" ContentType="application/'
    'vnd.openxmlformats-officedocument.spreadsheetml.worksheet+xml"/>'
    "</Types>"
)
_ROOT_RELS = (
    _XML_DECL
    + f'<Relationships xmlns="{_NS_PKG_REL}">'
    f'<Relationship Id="rId1" Type="{_NS_REL}/officeDocument" Target="xl/workbook.xml"/>'
    "</Relationships>"
)
_WORKBOOK_RELS = (
    _XML_DECL
    + f'<Relationships xmlns="{_NS_PKG_REL}">'
    f'<Relationship Id="rId1" Type="{_NS_REL}/worksheet" Target="worksheets/sheet1.xml"/>'
    "</Relationships>"
)


def _names(participants: Iterable[User]) -> list[tuple[str, str]]:
    return [(user.full_name, user.email) for user in participants]


def participants_csv(participants: Iterable[User]) -> bytes:
    """A UTF-8 CSV with a byte-order mark, a header line and one line per user."""
    lines = [",".join(HEADER)]
    lines.extend(f"{name},{email}" for name, email in _names(participants))
    return ("\ufeff" + "".join(line + "\n" for line in lines)).encode("utf-8")


def _cell(column: str, row: int, text: str) -> str:
    return (
        f'<c r="{column}{row}" t="inlineStr"><is>'
        f'<t xml:space="preserve">{escape(text)}</t></is></c>'
    )


def _sheet_xml(rows: list[tuple[str, str]]) -> str:
    body = []
    for number, (name, email) in enumerate(rows, start=1):
        body.append(f'<row r="{number}">{_cell("A", number, name)}{_cell("B", number, email)}</row>')
    return (
        _XML_DECL
        + f'<worksheet xmlns="{_NS_MAIN}"><sheetData>'
        + "".join(body)
        + "</sheetData></worksheet>"
    )


def _workbook_xml() -> str:
    return (
        _XML_DECL
        + f'<workbook xmlns="{_NS_MAIN}" xmlns:r="{_NS_REL}"><sheets>'
        f'<sheet name={quoteattr(SHEET_NAME)} sheetId="1" r:id="rId1"/>'
        "</sheets></workbook>"
    )


def participants_xlsx(participants: Iterable[User]) -> bytes:
    """A one-sheet workbook with a header row and one row per user."""
    rows = [HEADER, *_names(participants)]
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("[Content_Types].xml", _CONTENT_TYPES)
        archive.writestr("_rels/.rels", _ROOT_RELS)
        archive.writestr("xl/workbook.xml", _workbook_xml())
        archive.writestr("xl/_rels/workbook.xml.rels", _WORKBOOK_RELS)
        archive.writestr("xl/worksheets/sheet1.xml", _sheet_xml(rows))
    return buffer.getvalue()


def _event_participants(store: Store, event_id: uuid.UUID) -> list[EventParticipant]:
    found = {p.id: p for p in store.find(EventParticipant, event_id=event_id)}
    event = store.get(Event, event_id)
    if event is not None:
        for participant in event.participants:
            found.setdefault(participant.id, participant)
    return list(found.values())


def export_participants(
    store: Store, event_id: str, file_format: str = ""
) -> tuple[str, str, bytes]:
    """Content type, file name and content of an event's participant list."""
    if not validate_uuid(event_id):
        raise ApiError(400, "Неверный формат ID события")
    key = uuid.UUID(event_id)
    users = [
        store.get(User, p.user_id) or User(email="", id=uuid.UUID(int=0))
        for p in _event_participants(store, key)
    ]
    if file_format == "csv":
        return CSV_CONTENT_TYPE, "participants.csv", participants_csv(users)
    return XLSX_CONTENT_TYPE, "participants.xlsx", participants_xlsx(users)