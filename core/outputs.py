"""Run report output: JSONL and CSV."""

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

COLUMNS = [
    "path",
    "name",
    "previous_abbrlink",
    "abbrlink",
    "status",
    "needs_length_update",
    "created_at",
]


class ReportWriter:
    """Write per-document run records to disk."""

    def write(self, records: List[Dict[str, Any]], output_path: Path):
        """Write records, choosing the format from the file suffix."""
        if output_path.suffix.lower() == ".csv":
            self.write_csv(records, output_path)
        else:
            self.write_jsonl(records, output_path)

    def write_jsonl(self, records: List[Dict[str, Any]], output_path: Path):
        """
        Write records to JSONL file.

        Args:
            records: List of record dictionaries
            output_path: Output file
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            for record in records:
                f.write(json.dumps(record, ensure_ascii=False) + "\n")

        logger.info(f"Wrote {len(records)} records to {output_path}")

    def write_csv(self, records: List[Dict[str, Any]], output_path: Path):
        """
        Write records to CSV file.

        Args:
            records: List of record dictionaries
            output_path: Output file
        """
        if not records:
            logger.warning("No records to write to CSV")
            return

        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=COLUMNS, extrasaction="ignore")
            writer.writeheader()
            for record in records:
                writer.writerow({col: record.get(col, "") for col in COLUMNS})

        logger.info(f"Wrote {len(records)} records to {output_path}")
