"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  Prospect Tracker - Export Excel                                             ║
║                                                                              ║
║  FORMAT (20 colonnes, ordre fixe):                                           ║
║  Prospect, Geo, Month, Quarter, LOB, Call 1-3 (notes), Core Offerings,       ║
║  Primary/Secondary Need, Category, Trace, Sales SPOC, Opp ID, Opp Details,   ║
║  Deck (lien cliquable), RAG, Remark, Created At (YYYY-MM-DD)                 ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from io import BytesIO
from typing import Dict, List

import openpyxl
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

EXPORT_FILENAME = "prospect_data.xlsx"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SHEET_TITLE = "Prospects"

# (header, key, width)
EXPORT_COLUMNS = [
    ("Prospect", "prospect", 25),
    ("Geo", "geo", 15),
    ("Month", "month", 12),
    ("Quarter", "quarter", 12),
    ("LOB", "lob", 20),
    ("Call 1", "call1Notes", 30),
    ("Call 2", "call2Notes", 30),
    ("Call 3", "call3Notes", 30),
    ("Core Offerings", "coreOfferings", 30),
    ("Primary Need", "primaryNeed", 30),
    ("Secondary Need", "secondaryNeed", 30),
    ("Category", "category", 30),
    ("Trace", "trace", 30),
    ("Sales SPOC", "salesSpoc", 30),
    ("Opp ID", "oppId", 30),
    ("Opp Details", "oppDetails", 30),
    ("Deck", "deck", 30),
    ("RAG", "rag", 10),
    ("Remark", "remark", 40),
    ("Created At", "createdAt", 22),
]

COLUMN_KEYS = [key for _, key, _ in EXPORT_COLUMNS]
DECK_COLUMN = COLUMN_KEYS.index("deck") + 1

THIN = Side(style="thin")
THIN_BORDER = Border(top=THIN, left=THIN, right=THIN, bottom=THIN)

HEADER_FONT = Font(bold=True, color="FFFFFFFF", size=12)
HEADER_FILL = PatternFill(start_color="FF000000", end_color="FF000000", fill_type="solid")
HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center")
LINK_FONT = Font(color="FF0000FF", underline="single")


def clean_text(value):
    """Drop the control characters a worksheet cannot hold"""
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def prospect_row(item: Dict) -> Dict:
    """Flatten a prospect into the export columns"""
    row = {key: item.get(key) or "" for key in COLUMN_KEYS}
    for slot in ("call1", "call2", "call3"):
        call = item.get(slot) or {}
        row[f"{slot}Notes"] = call.get("notes") or ""
    row["createdAt"] = str(item.get("createdAt") or "")[:10]
    return {key: clean_text(value) for key, value in row.items()}


def build_workbook(items: List[Dict]) -> openpyxl.Workbook:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    # ----- Header row -----
    for col_num, (header, _, width) in enumerate(EXPORT_COLUMNS, 1):
        cell = ws.cell(row=1, column=col_num, value=header)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGNMENT
        cell.border = THIN_BORDER
        ws.column_dimensions[get_column_letter(col_num)].width = width

    # ----- Data rows -----
    for row_num, item in enumerate(items, start=2):
        row = prospect_row(item)
        for col_num, key in enumerate(COLUMN_KEYS, 1):
            cell = ws.cell(row=row_num, column=col_num, value=row[key])
            # user text is never a formula
            if isinstance(row[key], str):
                cell.data_type = "s"
            cell.border = THIN_BORDER

        if row["deck"]:
            cell = ws.cell(row=row_num, column=DECK_COLUMN)
            cell.hyperlink = row["deck"]
            cell.font = LINK_FONT

    return wb


def export_prospects_xlsx(items: List[Dict]) -> BytesIO:
    """Serialize prospects into an in-memory .xlsx buffer"""
    buffer = BytesIO()
    build_workbook(items).save(buffer)
    buffer.seek(0)
    return buffer
