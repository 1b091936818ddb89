# tests/ingestors/test_manager.py
"""
End-to-end tests for the catalog pipelines against an in-memory database.
"""
import logging
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from catalog.db.repositories.deal_repository import DealRepository
from catalog.db.repositories.product_repository import ProductRepository
from catalog.ingestors.base import ValidationError
from catalog.ingestors import manager as manager_module
from catalog.ingestors.handlers import deals as deals_handler
from catalog.ingestors.handlers import products as products_handler
from catalog.ingestors.manager import IngestorManager
from catalog.core.pricing import deal_price
from catalog.core.taxonomy import DEFAULT_SOURCES
from conftest import FIXED_NOW, FIXTURES_DIR, make_deal, make_product


@pytest.fixture
def manager(test_settings, session_factory, rng, fixed_clock):
    return IngestorManager(
        config=test_settings,
        session_factory=session_factory,
        rng=rng,
        clock=fixed_clock,
    )


def seed_products(db_session, count, **overrides):
    records = [make_product(sku=f"SKU-{i:04d}", title=f"Phone {i}", **overrides) for i in range(count)]
    ProductRepository(db_session).bulk_insert(records)


class TestSources:
    def test_builtin_table_when_no_file(self, manager):
        assert manager.get_sources() == list(DEFAULT_SOURCES)

    def test_yaml_override(self, manager, tmp_path):
        path = tmp_path / "sources.yaml"
        path.write_text(
            "sources:\n"
            "  - file: mobiles.csv\n"
            "    category: Smartphones\n"
            "    department: Mobile Devices\n"
            "    max_rows: 1\n"
        )
        manager.config.CATALOG_SOURCES_PATH = str(path)

        sources = manager.get_sources()

        assert len(sources) == 1
        assert sources[0].filename == "mobiles.csv"
        assert sources[0].max_rows == 1

    def test_invalid_yaml_entry(self, manager, tmp_path):
        path = tmp_path / "sources.yaml"
        path.write_text("sources:\n  - file: mobiles.csv\n")
        manager.config.CATALOG_SOURCES_PATH = str(path)

        with pytest.raises(ValidationError):
            manager.get_sources()


class TestCleanup:
    def test_cleanup_twice_leaves_empty_store(self, manager, db_session):
        seed_products(db_session, 3)
        DealRepository(db_session).bulk_insert(
            [make_deal(start_date=FIXED_NOW, end_date=FIXED_NOW + timedelta(days=10))]
        )

        first = manager.cleanup_database()
        second = manager.cleanup_database()

        assert first["status"] == "success"
        assert first["result"]["products_deleted"] == 3
        assert first["result"]["deals_deleted"] == 1
        assert second["status"] == "success"
        assert second["result"]["products_remaining"] == 0
        assert second["result"]["deals_remaining"] == 0


class TestImportProducts:
    def test_import_fixture_file(self, manager, db_session):
        result = manager.import_products()

        assert result["status"] == "success"
        assert result["result"]["files_processed"] == ["mobiles.csv"]
        assert len(result["result"]["files_missing"]) == len(DEFAULT_SOURCES) - 1
        assert result["result"]["products_imported"] == 2
        assert result["result"]["rows_skipped"] == 2
        assert result["result"]["by_category"] == {"Smartphones": 2}

        products = ProductRepository(db_session).list_by_filter({})
        assert len(products) == 2
        assert all(p.price > 0 for p in products)
        assert {p.department for p in products} == {"Mobile Devices"}

    def test_import_with_no_files(self, manager, tmp_path):
        manager.config.DATA_DIR = str(tmp_path)

        result = manager.import_products()

        assert result["status"] == "success"
        assert result["result"]["products_imported"] == 0
        assert len(result["result"]["files_missing"]) == len(DEFAULT_SOURCES)

    def test_invalid_source_table_reports_error(self, manager, tmp_path):
        path = tmp_path / "sources.yaml"
        path.write_text("sources:\n  - category: Laptops\n")
        manager.config.CATALOG_SOURCES_PATH = str(path)

        result = manager.import_products()

        assert result["status"] == "error"
        assert result["error_type"] == "ValidationError"

    def test_unreadable_file_does_not_stop_the_import(self, manager, tmp_path):
        (tmp_path / "mobiles.csv").write_bytes((FIXTURES_DIR / "data" / "mobiles.csv").read_bytes())
        # Enough valid rows to get past the first read buffer before the bad bytes
        rows = b"".join(
            b'Dell,XPS %d,Dell XPS %d,"1,000"\n' % (i, i) for i in range(400)
        )
        (tmp_path / "laptops.csv").write_bytes(
            b"Brand,Model,Product Name,Price in India\n" + rows + b"Dell,\xff\xfe,broken,1\n"
        )
        manager.config.DATA_DIR = str(tmp_path)

        result = manager.import_products()

        assert result["status"] == "success"
        assert result["result"]["files_failed"] == ["laptops.csv"]
        assert result["result"]["files_processed"] == ["mobiles.csv"]
        assert result["result"]["products_imported"] == 2
        assert result["result"]["by_category"] == {"Smartphones": 2}

    def test_rejected_rows_are_dropped_individually(self, manager, db_session):
        seed_products(db_session, 1)
        repo = ProductRepository(db_session)

        imported, rejected = manager._insert_products(
            repo,
            [make_product(sku="NEW-0001"), make_product(sku="SKU-0000")],
        )

        assert imported == 1
        assert rejected == ["SKU-0000"]
        assert repo.count() == 2


class TestCreateDeals:
    def test_creates_target_number_of_deals(self, manager, db_session):
        seed_products(db_session, 10)

        result = manager.create_deals(5)

        assert result["status"] == "success"
        assert result["result"]["eligible_products"] == 10
        assert result["result"]["deals_created"] == 5

        deals = DealRepository(db_session).list_by_filter({})
        product_ids = {p.id for p in ProductRepository(db_session).list_by_filter({})}
        assert len(deals) == 5
        for deal in deals:
            assert deal.product_id in product_ids
            assert 0 < deal.discount <= 50
            assert deal.price == deal_price(deal.original_price, deal.discount)

    def test_existing_deals_are_replaced(self, manager, db_session):
        seed_products(db_session, 10)

        manager.create_deals(4)
        manager.create_deals(4)

        assert DealRepository(db_session).count() == 4

    def test_failed_batch_is_counted_and_skipped(self, manager, db_session):
        seed_products(db_session, 10)
        manager.config.DEAL_BATCH_SIZE = 2
        real_insert = DealRepository.bulk_insert
        batches = []

        def flaky_insert(repo, records):
            batches.append(len(records))
            if len(batches) == 2:
                raise OperationalError("INSERT INTO deals", {}, Exception("database is locked"))
            return real_insert(repo, records)

        with patch.object(DealRepository, "bulk_insert", flaky_insert):
            result = manager.create_deals(5)

        assert result["status"] == "success"
        assert result["result"]["deals_generated"] == 5
        assert result["result"]["failed_batches"] == 1
        assert result["result"]["deals_created"] == 3
        assert batches == [2, 2, 1]
        assert DealRepository(db_session).count() == 3

    def test_no_eligible_products(self, manager, db_session):
        seed_products(db_session, 3, stock=5)

        result = manager.create_deals()

        assert result["status"] == "success"
        assert result["result"]["deals_created"] == 0
        assert DealRepository(db_session).count() == 0


class TestRebuild:
    def test_rebuild_runs_every_step(self, manager, db_session):
        result = manager.rebuild(10)

        assert result["status"] == "success"
        assert [step["step"] for step in result["steps"]] == [
            "cleanup",
            "import_products",
            "create_deals",
        ]
        assert ProductRepository(db_session).count() == 2

    def test_rebuild_stops_at_first_failure(self, manager):
        manager.import_products = MagicMock(
            return_value={"status": "error", "step": "import_products"}
        )
        manager.create_deals = MagicMock()

        result = manager.rebuild()

        assert result["status"] == "error"
        assert len(result["steps"]) == 2
        manager.create_deals.assert_not_called()


class TestLogging:
    @pytest.mark.parametrize("module", [manager_module, products_handler, deals_handler])
    def test_pipeline_loggers_are_configured(self, module):
        assert module.logger.handlers
        assert module.logger.isEnabledFor(logging.INFO)

    def test_import_logs_per_file_tally(self, manager, caplog):
        with caplog.at_level(logging.INFO):
            manager.import_products()

        assert "Processed 4 rows, extracted 2 valid products" in caplog.text
        assert "Smartphones: 2" in caplog.text
