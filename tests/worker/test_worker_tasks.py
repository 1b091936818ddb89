# tests/worker/test_worker_tasks.py
"""
Tests for the catalog Celery tasks with a mocked manager.
"""
from unittest.mock import MagicMock, patch

import pytest

from catalog.worker.celery_app import celery_app
from catalog.worker.tasks.ingest import (
    cleanup_database,
    create_deals,
    import_products,
    rebuild,
)


@pytest.fixture
def mock_ingestor_manager():
    """Mock the IngestorManager to avoid touching the database."""
    with patch("catalog.worker.tasks.ingest.IngestorManager") as mock_manager:
        mock_instance = MagicMock()
        mock_manager.return_value = mock_instance

        mock_instance.cleanup_database.return_value = {"status": "success", "step": "cleanup"}
        mock_instance.import_products.return_value = {
            "status": "success",
            "step": "import_products",
            "result": {"products_imported": 2},
        }
        mock_instance.create_deals.return_value = {
            "status": "success",
            "step": "create_deals",
            "result": {"deals_created": 5},
        }
        mock_instance.rebuild.return_value = {"status": "success", "steps": []}

        yield mock_instance


def test_tasks_are_registered():
    registered = celery_app.tasks.keys()
    for name in ("catalog:cleanup", "catalog:import_products", "catalog:create_deals", "catalog:rebuild"):
        assert name in registered


def test_cleanup_task(mock_ingestor_manager):
    result = cleanup_database()

    assert result["status"] == "success"
    mock_ingestor_manager.cleanup_database.assert_called_once_with()


def test_import_task(mock_ingestor_manager):
    result = import_products()

    assert result["result"]["products_imported"] == 2


def test_create_deals_task_passes_target(mock_ingestor_manager):
    result = create_deals(25)

    assert result["result"]["deals_created"] == 5
    mock_ingestor_manager.create_deals.assert_called_once_with(25)


def test_rebuild_task(mock_ingestor_manager):
    rebuild()
    mock_ingestor_manager.rebuild.assert_called_once_with(None)


def test_task_error_handling(mock_ingestor_manager):
    mock_ingestor_manager.import_products.side_effect = RuntimeError("database is down")

    result = import_products()

    assert result["status"] == "error"
    assert result["error_message"] == "database is down"
