# tests/db/test_product_model.py
from sqlalchemy import inspect
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateIndex

from catalog.db.models.product import Product, search_index


def test_search_index_is_declared_for_postgresql():
    assert search_index in Product.__table__.indexes

    ddl = str(CreateIndex(search_index).compile(dialect=postgresql.dialect()))

    assert "idx_products_search" in ddl
    assert "USING gin" in ddl
    assert "to_tsvector('english'" in ddl


def test_search_index_is_skipped_on_sqlite(db_engine):
    names = {index["name"] for index in inspect(db_engine).get_indexes("products")}

    assert "ix_products_sku" in names
    assert "idx_products_search" not in names
