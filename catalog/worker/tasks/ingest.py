# catalog/worker/tasks/ingest.py
"""
Celery tasks running the catalog pipelines.
"""
from typing import Optional
from celery import shared_task
from catalog.ingestors.manager import IngestorManager
from catalog.core.logging import get_logger

logger = get_logger(__name__)


@shared_task(name="catalog:cleanup")
def cleanup_database():
    """Delete every product and deal."""
    try:
        logger.info("Starting catalog cleanup task")
        return IngestorManager().cleanup_database()
    except Exception as e:
        logger.exception(f"Error in cleanup task: {e}")
        return {"status": "error", "step": "cleanup", "error_message": str(e)}


@shared_task(name="catalog:import_products")
def import_products():
    """Import products from the category CSV files."""
    try:
        logger.info("Starting product import task")
        return IngestorManager().import_products()
    except Exception as e:
        logger.exception(f"Error in product import task: {e}")
        return {"status": "error", "step": "import_products", "error_message": str(e)}


@shared_task(name="catalog:create_deals")
def create_deals(target_deals: Optional[int] = None):
    """Regenerate deals from the imported products."""
    try:
        logger.info(f"Starting deal generation task (target: {target_deals})")
        return IngestorManager().create_deals(target_deals)
    except Exception as e:
        logger.exception(f"Error in deal generation task: {e}")
        return {"status": "error", "step": "create_deals", "error_message": str(e)}


@shared_task(name="catalog:rebuild")
def rebuild(target_deals: Optional[int] = None):
    """
    Cleanup, import and deal generation in sequence.
    Each step only runs if the previous one succeeded.
    """
    try:
        logger.info("Starting full catalog rebuild task")
        return IngestorManager().rebuild(target_deals)
    except Exception as e:
        logger.exception(f"Error in rebuild task: {e}")
        return {"status": "error", "step": "unknown", "error_message": str(e)}
