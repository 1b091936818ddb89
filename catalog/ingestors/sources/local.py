# catalog/ingestors/sources/local.py
"""
Local CSV file source implementation.
"""
import csv
import os
from typing import Dict, Iterator

from catalog.ingestors.sources.base import BaseSource
from catalog.ingestors.base import SourceError
from catalog.core.config import settings
from catalog.core.logging import get_logger

logger = get_logger(__name__)


class LocalCsvSource(BaseSource):
    """
    Source for CSV files on the local file system.
    """

    @property
    def data_dir(self) -> str:
        return self.config.get("data_dir") or settings.DATA_DIR

    def _resolve_path(self, path: str) -> str:
        """
        Resolve file path, combining with the data directory if path is relative.

        Args:
            path: File path (can be absolute or relative)

        Returns:
            Resolved absolute path
        """
        # If path is already absolute, return as-is
        if os.path.isabs(path):
            return path

        # Combine relative path with the data directory
        return os.path.abspath(os.path.join(self.data_dir, path))

    def exists(self, path: str) -> bool:
        return os.path.isfile(self._resolve_path(path))

    def read_rows(self, path: str) -> Iterator[Dict[str, str]]:
        """
        Stream rows of a CSV file with a header line.

        Raises:
            SourceError: If the file is missing or cannot be parsed
        """
        resolved_path = self._resolve_path(path)
        logger.info(f"Reading CSV rows from {path} -> {resolved_path}")

        if not os.path.exists(resolved_path):
            raise SourceError(f"File not found: {resolved_path}")

        try:
            # utf-8-sig drops the byte-order mark spreadsheet exports add
            with open(resolved_path, "r", encoding="utf-8-sig", newline="") as f:
                reader = csv.DictReader(f)
                for row in reader:
                    yield row
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            logger.exception(f"Error reading CSV file {resolved_path}: {str(e)}")
            raise SourceError(f"Error reading CSV file {path}: {str(e)}")

    def validate_connection(self) -> bool:
        """
        Validate that the data directory is readable.
        """
        logger.info(f"Validating local data directory {self.data_dir}")
        accessible = os.path.isdir(self.data_dir) and os.access(self.data_dir, os.R_OK)
        if not accessible:
            logger.warning(f"Data directory not accessible: {self.data_dir}")
        return accessible
