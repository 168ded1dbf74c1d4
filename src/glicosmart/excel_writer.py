"""Generación de Excel con el historial de glucemia."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from glicosmart.history import ExportRow, export_frame

_HEADER_MAP: dict[str, str] = {
    "value": "Valor",
    "period": "Periodo",
    "date": "Data",
    "time": "Horario",
    "status": "Status",
    "message": "Mensagem",
}

_COLUMN_WIDTHS: dict[str, int] = {
    "Valor": 8,
    "Periodo": 12,
    "Data": 12,
    "Horario": 9,
    "Status": 15,
    "Mensagem": 60,
}

# Relleno suave por status para leer la planilla de un vistazo.
_STATUS_FILLS: dict[str, str] = {
    "Hipoglicemia": "FEE2E2",
    "Normal": "D1FAE5",
    "Alerta": "FFEDD5",
    "Hiperglicemia": "FEE2E2",
}


@dataclass(frozen=True)
class ExcelLayout:
    """Layout/formatting configuration for the history sheet."""

    sheet_name: str = "Historico Glicemia"


def write_history_xlsx(
    rows: Sequence[ExportRow], out_path: Path, layout: ExcelLayout
) -> None:
    """Write the filtered reading history to a formatted XLSX file.

    Args:
        rows: Export rows, usually from ``history.export_rows``.
        out_path: Output path for the XLSX file.
        layout: Excel layout parameters.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)
    export_df = export_frame(rows).rename(columns=_HEADER_MAP)

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        export_df.to_excel(writer, index=False, sheet_name=layout.sheet_name)
        ws = writer.book[layout.sheet_name]
        _format_sheet(ws)


def _style_header_row(ws: Any) -> None:
    """Aplica fuente negrita, alineación y borde a la fila de cabecera."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for cell in ws[1]:
        cell.font = header_font
        cell.alignment = center
        cell.border = border


def _style_body_rows(ws: Any, col_index: dict[str, int]) -> None:
    """Bordes, alineacion y relleno por status en las filas de datos."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    left = Alignment(horizontal="left", vertical="center", wrap_text=True)
    message_idx = col_index.get("Mensagem")
    status_idx = col_index.get("Status")
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = left if cell.column == message_idx else center
            cell.border = border
        if status_idx is not None:
            status_cell = row[status_idx - 1]
            color = _STATUS_FILLS.get(str(status_cell.value))
            if color:
                status_cell.fill = PatternFill(
                    start_color=color, end_color=color, fill_type="solid"
                )


def _get_header_col_index(ws: Any) -> dict[str, int]:
    """Devuelve mapa nombre de cabecera -> índice de columna (1-based)."""
    headers = [str(cell.value) for cell in ws[1]]
    return {name: idx + 1 for idx, name in enumerate(headers)}


def _apply_column_widths(ws: Any, col_index: dict[str, int]) -> None:
    """Establece anchos de columna para evitar ###."""
    for header, width in _COLUMN_WIDTHS.items():
        idx = col_index.get(header)
        if idx is not None:
            letter = ws.cell(row=1, column=idx).column_letter
            ws.column_dimensions[letter].width = width


def _format_sheet(ws: Any) -> None:
    """Apply borders, widths and status fills to a worksheet.

    Args:
        ws: openpyxl worksheet.
    """
    col_index = _get_header_col_index(ws)
    _style_header_row(ws)
    _style_body_rows(ws, col_index)
    _apply_column_widths(ws, col_index)
