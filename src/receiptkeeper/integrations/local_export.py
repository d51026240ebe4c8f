"""Local CSV export functionality for extracted receipt data."""

import csv
import fcntl
import os
from pathlib import Path

from receiptkeeper.models import ProcessingResult

CSV_HEADER = [
    "file",
    "merchant",
    "purchase_date",
    "total",
    "tax",
    "items",
    "confidence",
]


def _format_amount(amount: float | None) -> str:
    return f"{amount:.2f}" if amount is not None else ""


def result_to_row(result: ProcessingResult) -> list[str]:
    """Convert a completed ProcessingResult to a CSV row.

    Missing fields become empty cells.

    Raises:
        ValueError: If the result has no extraction attached
    """
    extraction = result.extraction
    if extraction is None:
        raise ValueError(f"No extraction available for {result.file_name}")

    return [
        result.file_name,
        extraction.merchant_name or "",
        extraction.purchase_date.isoformat() if extraction.purchase_date else "",
        _format_amount(extraction.total_amount),
        _format_amount(extraction.tax_amount),
        str(len(extraction.line_items)),
        f"{extraction.confidence:.1f}",
    ]


class LocalExporter:
    """Exporter for writing extracted receipt data to local CSV files."""

    def export(self, results: list[ProcessingResult], path: Path) -> None:
        """Export extraction results to a local CSV file.

        If the file doesn't exist, it will be created with headers.
        If the file exists, data will be appended to it.

        Args:
            results: Completed ProcessingResult objects to export
            path: Path to the CSV file to write/append to

        Raises:
            PermissionError: If the file cannot be written due to permissions
            OSError: If there are filesystem-related errors
        """
        # Don't create an empty file
        if not results:
            return

        path.parent.mkdir(parents=True, exist_ok=True)

        # Write the BOM manually when creating the file so that appends
        # never put one in the middle
        with open(path, mode="a", encoding="utf-8", newline="") as f:
            # Serialize concurrent writers
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                # Size checked after acquiring the lock
                is_new_file = os.fstat(f.fileno()).st_size == 0

                # UTF-8 BOM for Excel compatibility
                if is_new_file:
                    f.write("\ufeff")

                writer = csv.writer(f)
                if is_new_file:
                    writer.writerow(CSV_HEADER)

                for result in results:
                    writer.writerow(result_to_row(result))
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
