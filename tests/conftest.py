# tests/conftest.py
import os
import random
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Settings are read at import time; point them at an in-memory database first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"

# Add project root to Python path
project_root = Path(__file__).parent.parent.absolute()
sys.path.insert(0, str(project_root))

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from catalog.api.web_app import app
from catalog.core.config import Settings
from catalog.db.base import Base, get_db_session
import catalog.db.models  # noqa: F401

FIXTURES_DIR = Path(__file__).parent / "fixtures"
FIXED_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    """Create a test database session."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(db_session):
    """API client whose requests share the test session."""

    def override_get_db_session():
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def test_settings(tmp_path):
    """Settings reading CSVs from the fixtures directory."""
    return Settings(
        DATABASE_URL="sqlite://",
        ENVIRONMENT="test",
        DATA_DIR=str(FIXTURES_DIR / "data"),
        CATALOG_SOURCES_PATH=str(tmp_path / "no_sources.yaml"),
    )


def make_product(**overrides):
    """Product record eligible for deals unless overridden."""
    product = {
        "sku": "SAM-SMA-GALA-001",
        "title": "Samsung Galaxy S21",
        "description": "8 GB RAM, 128 GB Storage, 64 MP Camera",
        "price": 120000,
        "currency": "DZD",
        "category": "Smartphones",
        "department": "Mobile Devices",
        "image": "https://img.example.com/galaxy.jpg",
        "stock": 250,
        "rating": 4.5,
        "brand": "Samsung",
        "is_active": True,
    }
    product.update(overrides)
    return product


def make_deal(**overrides):
    deal = {
        "product_id": 1,
        "variant_sku": "SAM-SMA-GALA-001",
        "department": "Mobile Devices",
        "thumbnail": "https://img.example.com/galaxy.jpg",
        "image": "https://img.example.com/galaxy.jpg",
        "title": "Flash Sale: Samsung Galaxy S21 - 20% OFF",
        "description": "Get this amazing smartphones at an unbeatable price!",
        "short_description": "20% off Samsung smartphones",
        "price": 96000,
        "original_price": 120000,
        "currency": "DZD",
        "rating": 4.5,
        "discount": 20,
        "is_active": True,
        "start_date": "2026-10-10T00:00:00+00:00",
        "end_date": "2026-12-31T00:00:00+00:00",
    }
    deal.update(overrides)
    return deal
