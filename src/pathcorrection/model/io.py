"""
Input/Output Manager (CSV)
Handles loading and saving PointSequences as comma separated rows:

    x, y, z, rx, ry, rz[, tag, tag, ...]

The six leading fields are numeric, everything after them is kept verbatim.
"""
import csv
import logging
import os
from typing import List, Optional

from pathcorrection.model.geometry_primitives import Vector
from pathcorrection.model.points import PathPoint, PointSequence

# Get module logger
logger = logging.getLogger(__name__)

NUMERIC_FIELDS = 6
DECIMALS = 5


class PointIOError(Exception):
    """Base class for point file errors."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class PointLoadError(PointIOError):
    pass


class PointSaveError(PointIOError):
    pass


def _is_number(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


def _to_float(text: str) -> float:
    """Malformed fields fall back to 0.0 instead of dropping the row."""
    try:
        return float(text)
    except ValueError:
        return 0.0


class PointCsvIO:

    @staticmethod
    def parse_rows(rows: List[List[str]], drop_first_point: bool = False) -> PointSequence:
        """
        Convert raw CSV rows into a PointSequence.

        Args:
            rows: Rows as produced by csv.reader.
            drop_first_point: Discard the first parsed point. Some exporters
                write a dummy first sample after the header.

        Returns:
            The parsed sequence. A non-numeric first field on the first row marks
            a header, which is kept on the sequence and written back on save.
        """
        header: Optional[List[str]] = None
        points: List[PathPoint] = []
        skipped = 0
        first_row = True

        for row_index, row in enumerate(rows):
            if not row or all(not field.strip() for field in row):
                continue

            is_header = first_row and not _is_number(row[0].strip())
            first_row = False
            if is_header:
                header = list(row)
                logger.debug(f"Header row detected: {header}")
                continue

            if len(row) < NUMERIC_FIELDS:
                skipped += 1
                logger.debug(f"Skipping row {row_index + 1}: only {len(row)} fields.")
                continue

            x, y, z, rx, ry, rz = (_to_float(field.strip()) for field in row[:NUMERIC_FIELDS])
            points.append(PathPoint(
                position=Vector(x, y, z),
                orientation=Vector(rx, ry, rz),
                tags=list(row[NUMERIC_FIELDS:]),
            ))

        if drop_first_point and points:
            logger.info("Dropping first point (drop_first_point policy).")
            points = points[1:]

        if skipped:
            logger.warning(f"Skipped {skipped} rows with fewer than {NUMERIC_FIELDS} fields.")

        return PointSequence(points, header=header)

    @staticmethod
    def load(filepath: str, drop_first_point: bool = False) -> PointSequence:
        logger.info(f"Loading points from: {filepath}")
        try:
            with open(filepath, "r", newline="", encoding="utf-8-sig") as f:
                rows = list(csv.reader(f))
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            logger.exception(f"Failed to load points: {e}")
            raise PointLoadError(f"Could not read '{filepath}': {e}", filepath) from e

        sequence = PointCsvIO.parse_rows(rows, drop_first_point=drop_first_point)
        logger.info(f"Loaded {len(sequence)} points from: {os.path.basename(filepath)}")
        return sequence

    @staticmethod
    def format_row(point: PathPoint) -> List[str]:
        numbers = (*point.position.to_tuple(), *point.orientation.to_tuple())
        return [f"{v:.{DECIMALS}f}" for v in numbers] + list(point.tags)

    @staticmethod
    def save(filepath: str, sequence: PointSequence) -> None:
        logger.info(f"Saving {len(sequence)} points to: {filepath}")
        try:
            with open(filepath, "w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f, lineterminator="\n")
                if sequence.header:
                    writer.writerow(sequence.header)
                for point in sequence:
                    writer.writerow(PointCsvIO.format_row(point))
        except (OSError, csv.Error) as e:
            logger.exception(f"Failed to save points: {e}")
            raise PointSaveError(f"Could not write '{filepath}': {e}", filepath) from e

        logger.info(f"Points saved to: {filepath}")
