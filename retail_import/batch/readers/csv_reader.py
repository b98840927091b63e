"""
CSV reader for the staging load.
"""

import csv
from pathlib import Path

from retail_import.core.models import RawRecord
from retail_import.core.schema import SALES_COLUMNS, ColumnSpec, normalize_header
from retail_import.exceptions import ResourceError, SchemaMismatchError


class CSVReader:
    """
    Reads a sales CSV into RawRecords, keeping every cell as its original text.

    The header row must name each declared column exactly once (canonical
    name or alias, case-insensitive). Columns may appear in any order and are
    returned in declared order. Every data row must have as many fields as
    the header.
    """

    def __init__(
        self,
        columns: tuple[ColumnSpec, ...] = SALES_COLUMNS,
        delimiter: str = ",",
        encoding: str = "utf-8-sig",
    ):
        """
        Initialize CSV reader.

        Args:
            columns: Declared column table
            delimiter: Field delimiter
            encoding: File encoding (utf-8-sig also accepts files without a BOM)
        """
        self.columns = columns
        self.delimiter = delimiter
        self.encoding = encoding

    def read(self, file_path: str | Path) -> list[RawRecord]:
        """
        Read the whole CSV file.

        Args:
            file_path: Path to CSV file

        Returns:
            One RawRecord per data row, in file order

        Raises:
            ResourceError: If the file cannot be opened or decoded
            SchemaMismatchError: If the header or a row does not match the columns
        """
        path = Path(file_path)
        try:
            with open(path, newline="", encoding=self.encoding) as f:
                reader = csv.reader(f, delimiter=self.delimiter)
                header = next(reader, None)
                if header is None:
                    raise SchemaMismatchError(f"{path} is empty, expected a header row")
                positions = self.resolve_header(header)

                records = []
                for row in reader:
                    if not row:
                        # blank line
                        continue
                    if len(row) != len(header):
                        raise SchemaMismatchError(
                            f"expected {len(header)} fields, found {len(row)}",
                            line_number=reader.line_num,
                        )
                    values = {column.name: row[positions[column.name]] for column in self.columns}
                    records.append(RawRecord(**values, line_number=reader.line_num))
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise ResourceError(f"Cannot read CSV file {path}: {e}") from e

        return records

    def resolve_header(self, header: list[str]) -> dict[str, int]:
        """
        Map each declared column to its position in the header row.

        Raises:
            SchemaMismatchError: On missing, unknown or duplicate columns
        """
        lookup = {}
        for column in self.columns:
            for name in column.header_names():
                lookup[name] = column.name

        positions: dict[str, int] = {}
        unknown = []
        duplicates = []
        for index, name in enumerate(header):
            column_name = lookup.get(normalize_header(name))
            if column_name is None:
                unknown.append(name)
            elif column_name in positions:
                duplicates.append(name)
            else:
                positions[column_name] = index

        missing = [c.name for c in self.columns if c.name not in positions]

        problems = []
        if missing:
            problems.append(f"missing columns: {', '.join(missing)}")
        if unknown:
            problems.append(f"unknown columns: {', '.join(unknown)}")
        if duplicates:
            problems.append(f"duplicate columns: {', '.join(duplicates)}")
        if problems:
            raise SchemaMismatchError("CSV header does not match the sales table; " + "; ".join(problems))

        return positions
