"""Inventory and result file handling for the CLI."""

from __future__ import annotations

from collections.abc import Iterable
from csv import DictReader, DictWriter
from dataclasses import dataclass, field
from json import dumps as json_dumps, loads as json_loads
from typing import TYPE_CHECKING, Literal

from openpyxl import load_workbook as openpyxl_load_workbook
from openpyxl.workbook import Workbook as OpenPyXLWorkbook

if TYPE_CHECKING:
    from pathlib import Path

    from mini_telnet.types import JSON_TYPE


@dataclass(slots=True)
class InventoryReader:
    """Read host rows from an inventory file.

    Each row is a mapping with at least a ``host`` key; ``username``,
    ``password`` and ``prompt`` are optional per-host overrides.
    """

    path: Path
    type: Literal["csv", "json", "xlsx"]
    rows: list[dict[str, str]] = field(init=False)

    def __post_init__(self) -> None:
        """Load and validate the inventory.

        Raises:
            ValueError: If the file type is invalid or a row has no host.
        """
        match self.type:
            case "csv":
                rows = self._read_csv()
            case "json":
                rows = self._read_json()
            case "xlsx":
                rows = self._read_xlsx()
            case _:
                msg = f"Invalid file type: {self.type}"
                raise ValueError(msg)

        self.rows = []
        for number, row in enumerate(rows, 1):
            # Drop empty cells so they do not override CLI defaults; prompts keep their whitespace
            cleaned = {
                str(key).strip(): str(value)
                for key, value in row.items()
                if key is not None and value is not None and str(value).strip()
            }
            if not cleaned.get("host"):
                msg = f"Inventory row {number} has no host"
                raise ValueError(msg)
            self.rows.append(cleaned)

    def _read_csv(self) -> list[dict[str, str | None]]:
        return list(DictReader(self.path.read_text().splitlines()))

    def _read_json(self) -> list[dict[str, JSON_TYPE]]:
        data = json_loads(self.path.read_text())
        if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
            msg = "JSON inventory must be a list of objects"
            raise ValueError(msg)
        return data

    def _read_xlsx(self) -> list[dict[str, object]]:
        """Read rows from the active worksheet, using the first row as headers."""
        worksheet = openpyxl_load_workbook(filename=self.path, data_only=True, read_only=True).active
        rows = worksheet.iter_rows(values_only=True)
        headers = next(rows, None)
        if headers is None:
            return []
        return [dict(zip(headers, row, strict=False)) for row in rows]


@dataclass(slots=True)
class ResultWriter:
    """Write command results to a file in various formats."""

    path: Path
    type: Literal["csv", "json", "plain", "xlsx"]
    data: list[dict[str, JSON_TYPE]]

    def __post_init__(self) -> None:
        """Write the results.

        Raises:
            ValueError: If the file type is invalid.
        """
        match self.type:
            case "csv":
                self._write_csv()
            case "json":
                self._write_json()
            case "plain":
                self.path.write_text(format_plain(self.data))
            case "xlsx":
                self._write_xlsx()
            case _:
                msg = f"Invalid file type: {self.type}"
                raise ValueError(msg)

    def _write_csv(self) -> None:
        """Write one CSV row per record, using the first record's keys as headers."""
        with self.path.open("w", newline="") as handle:
            if not self.data:
                return
            writer = DictWriter(handle, fieldnames=list(self.data[0].keys()))
            writer.writeheader()
            for row in self.data:
                writer.writerow(row)

    def _write_json(self) -> None:
        self.path.write_text(json_dumps(self.data, indent=2))

    def _write_xlsx(self) -> None:
        """Write an Excel XLSX file.

        Raises:
            ValueError: If the data is empty.
        """
        if not self.data:
            msg = "No data to write to file"
            raise ValueError(msg)
        workbook = OpenPyXLWorkbook()
        worksheet = workbook.active
        headers = list(self.data[0].keys())
        worksheet.append(headers)
        for row in self.data:
            worksheet.append([_cell_value(row.get(key)) for key in headers])
        workbook.save(self.path)


def format_plain(data: Iterable[dict[str, JSON_TYPE]]) -> str:
    """Format records as readable text, one ``key: value`` line per field.

    Returns:
        The formatted text
    """
    blocks = []
    for record in data:
        lines = [f"{key}: {value}" for key, value in record.items()]
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def _cell_value(value: JSON_TYPE) -> JSON_TYPE:
    # Worksheet cells only hold scalars
    if isinstance(value, (dict, list)):
        return json_dumps(value)
    return value
