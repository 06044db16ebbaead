"""Import file reading: CSV and first-sheet XLSX into header/row records."""

import logging
import re
import zipfile
from datetime import date, datetime
from pathlib import Path
from typing import Any

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from budgetit.domain.errors import (
    UnreadableImportFileError,
    UnsupportedFileTypeError,
    unreadable_workbook,
    unsupported_file_type,
)

logger = logging.getLogger(__name__)

RawRow = dict[str, str]

_LINE_BREAK = re.compile(r"\r?\n")


def read_import_rows(file_path: str) -> tuple[list[str], list[RawRow]]:
    """Read an import file into an ordered header list and row records.

    Args:
        file_path: Path to a .csv or .xlsx file

    Returns:
        Tuple of (headers, rows). Each row maps every header to a trimmed
        string value; rows shorter than the header list are padded with "".

    Raises:
        UnsupportedFileTypeError: If the extension is not .csv or .xlsx
        FileNotFoundError: If the file doesn't exist
        UnreadableImportFileError: If an .xlsx file is not a readable workbook
    """
    path = Path(file_path)
    extension = path.suffix.lower()
    if extension not in (".csv", ".xlsx"):
        raise UnsupportedFileTypeError(unsupported_file_type(extension))

    if not path.exists():
        raise FileNotFoundError(f"Import file not found: {file_path}")

    if extension == ".csv":
        grid = _read_csv_grid(path)
    else:
        grid = _read_xlsx_grid(path)

    if not grid:
        return [], []

    headers = grid[0]
    rows = [_to_record(headers, cells) for cells in grid[1:]]
    logger.info("Read %d data rows from %s", len(rows), path.name)
    return headers, rows


def _read_csv_grid(path: Path) -> list[list[str]]:
    # newline="" keeps a lone "\r" inside its line
    with path.open(encoding="utf-8-sig", newline="") as f:
        text = f.read()
    # Blank and whitespace-only lines are dropped before tokenizing
    lines = [line.rstrip() for line in _LINE_BREAK.split(text)]
    return [split_csv_line(line) for line in lines if line]


def split_csv_line(line: str) -> list[str]:
    """Split one CSV line into trimmed cells.

    Quotes only group commas within this line; a doubled quote inside a
    quoted section is a literal quote. An unbalanced quote runs to the end
    of the line and never spills into the next one.
    """
    cells = []
    current = []
    in_quotes = False
    index = 0
    while index < len(line):
        char = line[index]
        if char == '"':
            if in_quotes and line[index + 1 : index + 2] == '"':
                current.append('"')
                index += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            cells.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        index += 1
    cells.append("".join(current).strip())
    return cells


def _read_xlsx_grid(path: Path) -> list[list[str]]:
    # Blank rows inside the sheet are kept so row numbers match the sheet
    try:
        wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    except (zipfile.BadZipFile, InvalidFileException, KeyError) as e:
        raise UnreadableImportFileError(unreadable_workbook(path.name, e)) from e
    try:
        if not wb.worksheets:
            return []
        sheet = wb.worksheets[0]
        return [[_cell_to_str(value) for value in values] for values in sheet.iter_rows(values_only=True)]
    finally:
        wb.close()


def _cell_to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _to_record(headers: list[str], cells: list[str]) -> RawRow:
    record: RawRow = {}
    for index, header in enumerate(headers):
        if header in record:
            # Repeated header: the first column wins
            continue
        record[header] = cells[index] if index < len(cells) else ""
    return record
