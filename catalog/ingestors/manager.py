# catalog/ingestors/manager.py
"""
Manager for orchestrating the catalog pipelines.
"""
import os
import random
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import yaml
from sqlalchemy.exc import SQLAlchemyError

from catalog.core.config import Settings, settings
from catalog.core.taxonomy import CatalogSource, DEFAULT_MAX_ROWS, DEFAULT_SOURCES
from catalog.db.base import Base, SessionLocal
from catalog.db.repositories.deal_repository import DealRepository
from catalog.db.repositories.product_repository import ProductRepository
from catalog.ingestors.base import SourceError, ValidationError, chunked
from catalog.ingestors.handlers.deals import (
    DealGenerator,
    MIN_PRICE,
    MIN_RATING,
    MIN_STOCK,
)
from catalog.ingestors.handlers.products import ProductFileHandler, ProductTransformer
from catalog.ingestors.sources.factory import SourceFactory
from catalog.schemas.product import ProductInDB
from catalog.core.logging import get_logger

logger = get_logger(__name__)

SAMPLE_DEALS = 3


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IngestorManager:
    """
    Manager for orchestrating cleanup, product import and deal generation.

    Every step returns a status dictionary; a step that fails reports
    ``status: "error"`` instead of raising.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        session_factory=None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.config = config or settings
        self.session_factory = session_factory or SessionLocal
        self.rng = rng or random.Random()
        self.clock = clock
        logger.info(f"Initialized IngestorManager with data dir: {self.config.DATA_DIR}")

    def get_sources(self) -> List[CatalogSource]:
        """
        Get the category sources to import, in import order.

        The YAML file at CATALOG_SOURCES_PATH overrides the built-in table
        when it exists.

        Raises:
            ValidationError: If the YAML file exists but an entry is invalid
        """
        path = self.config.CATALOG_SOURCES_PATH
        if not path or not os.path.exists(path):
            logger.info("Using built-in catalog source table")
            return list(DEFAULT_SOURCES)

        logger.info(f"Loading catalog sources from {path}")
        with open(path, "r") as f:
            config = yaml.safe_load(f)

        if not config or not config.get("sources"):
            logger.warning(f"No sources defined in {path}, using built-in table")
            return list(DEFAULT_SOURCES)

        sources = []
        for index, entry in enumerate(config["sources"]):
            try:
                sources.append(
                    CatalogSource(
                        filename=entry["file"],
                        category=entry["category"],
                        department=entry["department"],
                        max_rows=int(entry.get("max_rows", DEFAULT_MAX_ROWS)),
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                raise ValidationError(f"Invalid source entry {index} in {path}: {e}")
        return sources

    def _error_result(self, step: str, start_time: datetime, error: Exception) -> Dict[str, Any]:
        logger.exception(f"Error during {step}: {str(error)}")
        return {
            "status": "error",
            "step": step,
            "duration_seconds": (self.clock() - start_time).total_seconds(),
            "error_type": type(error).__name__,
            "error_message": str(error),
        }

    def cleanup_database(self) -> Dict[str, Any]:
        """
        Make sure the schema exists and delete every product and deal.

        Safe to run repeatedly.
        """
        logger.info("Starting database cleanup...")
        start_time = self.clock()

        try:
            db_session = self.session_factory()
            try:
                Base.metadata.create_all(bind=db_session.get_bind())

                product_repo = ProductRepository(db_session)
                deal_repo = DealRepository(db_session)

                products_before = product_repo.count()
                deals_before = deal_repo.count()
                logger.info(f"Current products: {products_before}")
                logger.info(f"Current deals: {deals_before}")

                products_deleted = product_repo.delete_all()
                deals_deleted = deal_repo.delete_all()
                logger.info(f"Deleted {products_deleted} products")
                logger.info(f"Deleted {deals_deleted} deals")

                products_after = product_repo.count()
                deals_after = deal_repo.count()
                logger.info(
                    f"Final state: {products_after} products, {deals_after} deals"
                )
            finally:
                db_session.close()
        except Exception as e:
            return self._error_result("cleanup", start_time, e)

        return {
            "status": "success",
            "step": "cleanup",
            "duration_seconds": (self.clock() - start_time).total_seconds(),
            "result": {
                "products_deleted": products_deleted,
                "deals_deleted": deals_deleted,
                "products_remaining": products_after,
                "deals_remaining": deals_after,
            },
        }

    def import_products(self) -> Dict[str, Any]:
        """
        Read every category CSV, transform its rows and insert the products.

        Missing files are skipped with a warning and a file that cannot be
        read contributes nothing. A batch the store rejects is retried row
        by row so only the offending rows are dropped.
        """
        logger.info("Starting product import...")
        start_time = self.clock()

        try:
            sources = self.get_sources()
            source = SourceFactory.create("local", {"data_dir": self.config.DATA_DIR})

            db_session = self.session_factory()
            try:
                product_repo = ProductRepository(db_session)

                transformer = ProductTransformer(
                    exchange_rate=self.config.EXCHANGE_RATE,
                    currency=self.config.TARGET_CURRENCY,
                    rng=self.rng,
                )
                transformer.issued_skus.update(product_repo.all_skus())
                handler = ProductFileHandler(source, transformer)

                all_products: List[Dict[str, Any]] = []
                files_processed = []
                files_missing = []
                files_failed = []
                rows_skipped = 0

                for catalog_source in sources:
                    if not source.exists(catalog_source.filename):
                        logger.warning(f"File not found: {catalog_source.filename}")
                        files_missing.append(catalog_source.filename)
                        continue

                    try:
                        file_result = handler.process(catalog_source)
                    except SourceError as e:
                        logger.error(f"Error processing {catalog_source.filename}: {str(e)}")
                        files_failed.append(catalog_source.filename)
                        continue

                    all_products.extend(file_result["products"])
                    rows_skipped += file_result["skipped"]
                    files_processed.append(catalog_source.filename)

                logger.info(f"Total products to import: {len(all_products)}")

                if not all_products:
                    logger.warning("No products to import!")
                    imported = 0
                    rejected: List[str] = []
                else:
                    imported, rejected = self._insert_products(product_repo, all_products)

                breakdown = Counter(product["category"] for product in all_products)
                logger.info("Products by category:")
                for category, count in sorted(breakdown.items()):
                    logger.info(f"   {category}: {count}")

                total_in_store = product_repo.count()
                logger.info(f"Import complete: {imported} products imported")
                logger.info(f"Total products in database: {total_in_store}")
            finally:
                db_session.close()
        except Exception as e:
            return self._error_result("import_products", start_time, e)

        return {
            "status": "success",
            "step": "import_products",
            "duration_seconds": (self.clock() - start_time).total_seconds(),
            "result": {
                "files_processed": files_processed,
                "files_missing": files_missing,
                "files_failed": files_failed,
                "rows_skipped": rows_skipped,
                "products_extracted": len(all_products),
                "products_imported": imported,
                "products_rejected": rejected,
                "by_category": dict(breakdown),
                "total_in_store": total_in_store,
            },
        }

    def _insert_products(self, product_repo: ProductRepository, records: List[Dict[str, Any]]):
        batch_size = self.config.PRODUCT_BATCH_SIZE
        imported = 0
        rejected: List[str] = []

        for batch in chunked(records, batch_size):
            try:
                imported += product_repo.bulk_insert(batch)
            except SQLAlchemyError as e:
                logger.warning(f"Batch insert failed, retrying row by row: {str(e)}")
                inserted, batch_rejected = product_repo.insert_each(batch)
                imported += inserted
                for sku in batch_rejected:
                    logger.warning(f"   Dropped product {sku}: rejected by the store")
                rejected.extend(batch_rejected)
            logger.info(f"Imported batch: {imported}/{len(records)} products")

        return imported, rejected

    def create_deals(self, target_deals: Optional[int] = None) -> Dict[str, Any]:
        """
        Replace all deals with a fresh set generated from eligible products.
        """
        target = target_deals if target_deals is not None else self.config.TARGET_DEALS
        logger.info(f"Starting deal generation (target: {target} deals)...")
        start_time = self.clock()

        try:
            db_session = self.session_factory()
            try:
                product_repo = ProductRepository(db_session)
                deal_repo = DealRepository(db_session)

                existing = deal_repo.count()
                if existing > 0:
                    deal_repo.delete_all()
                    logger.info(f"Cleared {existing} existing deals")

                candidates = [
                    ProductInDB.model_validate(product).model_dump()
                    for product in product_repo.list_deal_candidates(
                        MIN_STOCK, MIN_RATING, MIN_PRICE
                    )
                ]
                logger.info(f"Found {len(candidates)} eligible products")

                generator = DealGenerator(
                    rng=self.rng, clock=self.clock, currency=self.config.TARGET_CURRENCY
                )
                deals = generator.generate(candidates, target)

                if not deals:
                    logger.warning("No suitable products found for deals!")
                    created = 0
                    failed_batches = 0
                else:
                    created, failed_batches = self._insert_deals(deal_repo, deals)

                self._report_deals(deal_repo, deals)
            finally:
                db_session.close()
        except Exception as e:
            return self._error_result("create_deals", start_time, e)

        return {
            "status": "success",
            "step": "create_deals",
            "duration_seconds": (self.clock() - start_time).total_seconds(),
            "result": {
                "eligible_products": len(candidates),
                "deals_generated": len(deals),
                "deals_created": created,
                "failed_batches": failed_batches,
                "by_department": dict(Counter(deal["department"] for deal in deals)),
            },
        }

    def _insert_deals(self, deal_repo: DealRepository, deals: List[Dict[str, Any]]):
        batch_size = self.config.DEAL_BATCH_SIZE
        created = 0
        failed_batches = 0

        for number, batch in enumerate(chunked(deals, batch_size), start=1):
            try:
                created += deal_repo.bulk_insert(batch)
                logger.info(f"Created batch {number}: {created}/{len(deals)} deals")
            except SQLAlchemyError as e:
                failed_batches += 1
                logger.error(f"Error creating deal batch {number}: {str(e)}")

        return created, failed_batches

    def _report_deals(self, deal_repo: DealRepository, deals: List[Dict[str, Any]]) -> None:
        if not deals:
            return

        logger.info("Deals by department:")
        for department, count in sorted(Counter(d["department"] for d in deals).items()):
            logger.info(f"   {department}: {count} deals")

        now = self.clock()
        active_now = sum(1 for d in deals if d["start_date"] <= now <= d["end_date"])
        upcoming = sum(1 for d in deals if d["start_date"] > now)
        ending_soon = sum(
            1 for d in deals
            if d["start_date"] <= now <= d["end_date"]
            and (d["end_date"] - now).total_seconds() <= 3 * 86400
        )
        logger.info("Deal timing analysis:")
        logger.info(f"   Currently active: {active_now}")
        logger.info(f"   Starting soon: {upcoming}")
        logger.info(f"   Ending within 3 days: {ending_soon}")

        logger.info("Sample deals:")
        for deal in deal_repo.sample(SAMPLE_DEALS):
            logger.info(f"   {deal.title}")
            logger.info(
                f"      {deal.original_price:,} -> {deal.price:,} {deal.currency} "
                f"({deal.discount}% off)"
            )

    def rebuild(self, target_deals: Optional[int] = None) -> Dict[str, Any]:
        """
        Run cleanup, import and deal generation; stop at the first failure.
        """
        steps = [
            self.cleanup_database,
            self.import_products,
            lambda: self.create_deals(target_deals),
        ]
        results = []
        for step in steps:
            result = step()
            results.append(result)
            if result["status"] != "success":
                logger.error(f"Rebuild stopped: {result['step']} failed")
                return {"status": "error", "steps": results}

        logger.info("Rebuild complete")
        return {"status": "success", "steps": results}
