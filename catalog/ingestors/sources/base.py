# catalog/ingestors/sources/base.py
"""
Base classes for data sources.
"""
from abc import ABC, abstractmethod
from typing import Dict, Any, Iterator, Optional
from catalog.core.logging import get_logger

logger = get_logger(__name__)


class BaseSource(ABC):
    """
    Abstract base class for all row sources.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the source with optional configuration.

        Args:
            config: Configuration dictionary
        """
        self.config = config or {}
        logger.debug(f"Initialized {self.__class__.__name__} with config: {self.config}")

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Whether the named input is present."""
        pass

    @abstractmethod
    def read_rows(self, path: str) -> Iterator[Dict[str, str]]:
        """
        Stream rows from the source.

        Args:
            path: Path to the data, relative to the source root

        Yields:
            One dictionary per row, keyed by column header

        Raises:
            SourceError: If the data cannot be read
        """
        pass

    def validate_connection(self) -> bool:
        """
        Validate that the source is accessible.

        Returns:
            True if the source is accessible, False otherwise
        """
        logger.info(f"Validating connection for {self.__class__.__name__}")
        return True
