from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import cast

from openpyxl import Workbook, load_workbook
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from glicosmart.excel_writer import ExcelLayout, _format_sheet, write_history_xlsx
from glicosmart.history import ExportRow, export_rows
from glicosmart.model import Period, Reading

BRT = timezone(timedelta(hours=-3))


def _rows() -> list[ExportRow]:
    readings = [
        Reading(
            id="2",
            value=160,
            period=Period.POST_LUNCH,
            timestamp=datetime(2025, 12, 16, 13, 45, tzinfo=BRT),
        ),
        Reading(
            id="1",
            value=98,
            period=Period.FASTING,
            timestamp=datetime(2025, 12, 15, 7, 30, tzinfo=BRT),
        ),
    ]
    return export_rows(readings, zone=BRT)


def test_write_history_xlsx_happy_path_and_formatting(tmp_path: Path) -> None:
    """Una fila por medicion: Valor, Periodo, Data, Horario, Status, Mensagem."""
    out = tmp_path / "nested" / "out.xlsx"
    write_history_xlsx(_rows(), out, ExcelLayout())

    wb = load_workbook(out)
    ws = cast(Worksheet, wb[ExcelLayout().sheet_name])

    headers = [cell.value for cell in ws[1]]
    assert headers == ["Valor", "Periodo", "Data", "Horario", "Status", "Mensagem"]

    assert ws.cell(row=2, column=1).value == 160
    assert ws.cell(row=2, column=2).value == "pos-almoco"
    assert ws.cell(row=2, column=3).value == "16/12/2025"
    assert ws.cell(row=2, column=4).value == "13:45"
    assert ws.cell(row=3, column=5).value == "Normal"

    assert ws.cell(row=1, column=1).font.bold is True
    msg_col = headers.index("Mensagem") + 1
    assert ws.cell(row=2, column=msg_col).alignment.horizontal == "left"
    assert ws.cell(row=2, column=1).alignment.horizontal == "center"
    assert ws.column_dimensions[get_column_letter(msg_col)].width == 60

    status_cell = ws.cell(row=2, column=headers.index("Status") + 1)
    assert status_cell.fill.fill_type == "solid"
    assert str(status_cell.fill.start_color.rgb).endswith("FFEDD5")


def test_write_history_xlsx_custom_sheet_name(tmp_path: Path) -> None:
    out = tmp_path / "out.xlsx"
    write_history_xlsx(_rows(), out, ExcelLayout(sheet_name="Março"))
    wb = load_workbook(out)
    assert wb.sheetnames == ["Março"]


def test_write_history_xlsx_without_rows_writes_headers(tmp_path: Path) -> None:
    out = tmp_path / "empty.xlsx"
    write_history_xlsx([], out, ExcelLayout())
    ws = load_workbook(out)[ExcelLayout().sheet_name]
    assert [cell.value for cell in ws[1]][0] == "Valor"
    assert ws.max_row == 1


def test_format_sheet_handles_missing_headers() -> None:
    wb = Workbook()
    ws = cast(Worksheet, wb.active)
    ws.append(["Solo"])
    ws.append([1])

    _format_sheet(ws)

    assert ws.cell(row=1, column=1).font.bold is True
    assert ws.cell(row=2, column=1).alignment.horizontal == "center"
