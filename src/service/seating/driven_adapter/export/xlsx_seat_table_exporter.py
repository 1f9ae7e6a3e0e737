"""
Excel export of the seat table (openpyxl)
"""

import io
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from src.service.seating.app.interface.i_seat_table_exporter import ISeatTableExporter
from src.service.shared_kernel.domain.entity.seat_record import SeatRecord


COLUMNS = ('Section', 'Row', 'Block', 'Seat Number', 'Name', 'Status')
SHEET_TITLE = 'Seats'

# Style constants
HEADER_FONT = Font(bold=True, color='FFFFFF')
HEADER_FILL = PatternFill(start_color='1F4E79', end_color='1F4E79', fill_type='solid')
THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin'),
)


def _style_header(ws: Worksheet, row: int, cols: int) -> None:
    for col in range(1, cols + 1):
        cell = ws.cell(row=row, column=col)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal='center', vertical='center')
        cell.border = THIN_BORDER


def _auto_width(ws: Worksheet) -> None:
    for column_cells in ws.columns:
        max_length = max((len(str(cell.value)) for cell in column_cells if cell.value), default=0)
        ws.column_dimensions[column_cells[0].column_letter].width = max(min(max_length + 4, 60), 12)


class XlsxSeatTableExporter(ISeatTableExporter):
    media_type = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    file_extension = 'xlsx'

    def export(self, rows: List[SeatRecord]) -> bytes:
        wb = Workbook()
        ws = wb.active
        ws.title = SHEET_TITLE

        ws.append(COLUMNS)
        _style_header(ws, row=1, cols=len(COLUMNS))

        for record in rows:
            ws.append(
                (
                    record.key.section.upper(),
                    record.key.row,
                    record.key.block,
                    record.key.number,
                    record.occupant_name or '',
                    'Occupied' if record.is_occupied else 'Empty',
                )
            )
        _auto_width(ws)

        output = io.BytesIO()
        wb.save(output)
        return output.getvalue()
