# catalog/ingestors/sources/factory.py
"""
Factory for creating source instances.
"""
from typing import Dict, Any, Optional

from catalog.ingestors.sources.base import BaseSource
from catalog.ingestors.sources.local import LocalCsvSource
from catalog.ingestors.base import SourceError
from catalog.core.logging import get_logger

logger = get_logger(__name__)


class SourceFactory:
    """
    Factory for creating source instances.
    """

    @staticmethod
    def create(source_type: str, config: Optional[Dict[str, Any]] = None) -> BaseSource:
        """
        Create a source instance based on type.

        Args:
            source_type: Type of source ("local")
            config: Configuration dictionary

        Returns:
            Source instance

        Raises:
            SourceError: If source type is unknown
        """
        logger.info(f"Creating source of type: {source_type}")

        if source_type == "local":
            return LocalCsvSource(config)
        else:
            raise SourceError(f"Unknown source type: {source_type}")
