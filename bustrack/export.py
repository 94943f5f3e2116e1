import logging
import os
import re
from datetime import datetime

import pandas as pd
from openpyxl import load_workbook
from openpyxl.styles import PatternFill, Alignment, Font, Border, Side
from openpyxl.worksheet.page import PageMargins

from bustrack.constants import RECORDS_FOLDER
from bustrack.models import describe_attendance

logger = logging.getLogger(__name__)

COLUMNS = ["No.", "Name", "Group", "Pickup time", "Attendance", "Marked at"]


def _folder_name(route):
    name = route.title or f"route_{route.id}"
    return re.sub(r"[^\w\- ]", "_", name).strip() or f"route_{route.id}"


def route_sheet_rows(students):
    rows = []
    for student in sorted(students, key=lambda s: s.name):
        rows.append([
            len(rows) + 1,
            student.name,
            student.group or "",
            student.pickup_time or "",
            describe_attendance(student.attendance_status).label,
            student.last_attendance_timestamp or "",
        ])
    return rows


def export_route_sheet(route, students, folder=RECORDS_FOLDER, day=None):
    """Write the day's attendance of one route to an .xlsx file and return its path."""
    day = day or datetime.now().strftime("%Y-%m-%d")

    folder_path = os.path.join(folder, _folder_name(route))
    os.makedirs(folder_path, exist_ok=True)
    file_path = os.path.join(folder_path, f"{day}.xlsx")

    df = pd.DataFrame(route_sheet_rows(students), columns=COLUMNS)
    df.to_excel(file_path, index=False, engine="openpyxl")

    wb = load_workbook(file_path)
    ws = wb.active
    ws.title = "Attendance"

    header_fill_yellow = PatternFill("solid", start_color="FFFF00")
    header_fill_gray = PatternFill("solid", start_color="D3D3D3")
    header_fill_green = PatternFill("solid", start_color="9BBB59")

    header_font = Font(bold=True, size=14)
    data_font = Font(size=12)

    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)

    for col_idx, header in enumerate(COLUMNS, start=1):
        cell = ws.cell(row=1, column=col_idx)
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center", vertical="center")
        cell.border = border

        if header == "No.":
            cell.fill = header_fill_yellow
        elif header == "Attendance":
            cell.fill = header_fill_green
        else:
            cell.fill = header_fill_gray

    data_fill = PatternFill("solid", start_color="F0F8FF")

    for row in ws.iter_rows(
        min_row=2,
        max_row=ws.max_row,
        min_col=1,
        max_col=len(COLUMNS)
    ):
        for cell in row:
            cell.font = data_font
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.fill = data_fill
            cell.border = border

    for letter, width in zip("ABCDEF", (5, 28, 15, 12, 14, 30)):
        ws.column_dimensions[letter].width = width

    ws.page_margins = PageMargins(
        left=0.3, right=0.3,
        top=0.4, bottom=0.4,
        header=0.3, footer=0.3
    )

    ws.page_setup.orientation = ws.ORIENTATION_LANDSCAPE
    ws.page_setup.paperSize = ws.PAPERSIZE_A4
    ws.page_setup.fitToWidth = 1
    ws.page_setup.fitToHeight = 0

    wb.save(file_path)
    logger.info("Exported %d students of route %s to %s", len(students), route.id, file_path)
    return file_path
