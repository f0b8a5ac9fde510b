"""Spreadsheet-style tables read and written by row and column."""

import csv
from collections.abc import Iterator
from pathlib import Path
from typing import Protocol
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.utils import column_index_from_string
from openpyxl.utils.exceptions import InvalidFileException

from nearby_cities.logging_config import logger

INPUT_COLUMN = "A"
OUTPUT_COLUMN = "B"
HEADER_ROWS = 1


class SheetError(Exception):
    """Raised when a sheet cannot be opened or saved."""
    pass


class Sheet(Protocol):
    def read_rows(self) -> Iterator[tuple[int, str]]: ...

    def write_cell(self, row_index: int, column: str, value: str) -> None: ...

    def save(self) -> None: ...


class CsvSheet:
    """A csv file held in memory and rewritten on save.

    Row indices are 1-based like spreadsheet rows, so the header is row 1.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        try:
            with open(self.path, newline="", encoding="utf-8") as f:
                self.rows: list[list[str]] = [row for row in csv.reader(f)]
        except OSError as exc:
            raise SheetError(f"Cannot open sheet: {self.path}") from exc

    def read_rows(self) -> Iterator[tuple[int, str]]:
        input_index = column_index_from_string(INPUT_COLUMN) - 1
        for row_index, row in enumerate(self.rows[HEADER_ROWS:], start=HEADER_ROWS + 1):
            value = row[input_index] if input_index < len(row) else ""
            yield row_index, value

    def write_cell(self, row_index: int, column: str, value: str) -> None:
        while len(self.rows) < row_index:
            self.rows.append([])
        row = self.rows[row_index - 1]
        column_index = column_index_from_string(column) - 1
        if len(row) <= column_index:
            row.extend([""] * (column_index + 1 - len(row)))
        row[column_index] = value

    def save(self) -> None:
        try:
            with open(self.path, "w", newline="", encoding="utf-8") as f:
                csv.writer(f).writerows(self.rows)
        except OSError as exc:
            raise SheetError(f"Cannot save sheet: {self.path}") from exc
        logger.info("SHEET_SAVED", path=str(self.path), rows=len(self.rows))


def _cell_text(value) -> str:
    if value is None:
        return ""
    # Spreadsheet numbers often load as floats, e.g. a postcode 10001 as 10001.0
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class ExcelSheet:
    """One worksheet of an xlsx workbook."""

    def __init__(self, path: str | Path, sheet_name: str | None = None):
        self.path = Path(path)
        try:
            self.workbook: Workbook = load_workbook(self.path)
        except (OSError, InvalidFileException, BadZipFile) as exc:
            raise SheetError(f"Cannot open sheet: {self.path}") from exc
        if sheet_name is None:
            self.worksheet = self.workbook.active
        elif sheet_name in self.workbook.sheetnames:
            self.worksheet = self.workbook[sheet_name]
        else:
            raise SheetError(f"No worksheet named {sheet_name!r} in {self.path}")

    def read_rows(self) -> Iterator[tuple[int, str]]:
        input_index = column_index_from_string(INPUT_COLUMN)
        for row in self.worksheet.iter_rows(
            min_row=HEADER_ROWS + 1, min_col=input_index, max_col=input_index
        ):
            cell = row[0]
            yield cell.row, _cell_text(cell.value)

    def write_cell(self, row_index: int, column: str, value: str) -> None:
        self.worksheet[f"{column}{row_index}"] = value

    def save(self) -> None:
        try:
            self.workbook.save(self.path)
        except OSError as exc:
            raise SheetError(f"Cannot save sheet: {self.path}") from exc
        logger.info("SHEET_SAVED", path=str(self.path), rows=self.worksheet.max_row)


def open_sheet(path: str | Path, sheet_name: str | None = None) -> Sheet:
    """Open a csv or xlsx file as a Sheet.

    Args:
        path: Sheet file; ``.xlsx`` and ``.xlsm`` open as workbooks.
        sheet_name: Worksheet to use for workbooks, the active one by default.

    Returns:
        A Sheet for the file.
    """
    path = Path(path)
    if path.suffix.lower() in (".xlsx", ".xlsm"):
        return ExcelSheet(path, sheet_name=sheet_name)
    return CsvSheet(path)
