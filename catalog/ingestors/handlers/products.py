# catalog/ingestors/handlers/products.py
"""
Handler turning category CSV rows into product records.
"""
import math
import random
import re
from typing import Dict, Any, List, Optional, Set

from catalog.core.taxonomy import CatalogSource, DESCRIPTION_ATTRIBUTES
from catalog.core.pricing import round_half_up
from catalog.ingestors.base import validate_json, ValidationError
from catalog.ingestors.sources.base import BaseSource
from catalog.core.logging import get_logger

logger = get_logger(__name__)

PRICE_NOISE = re.compile(r"[₹$€£,\s]")
NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")
QUOTES = re.compile(r"[\"']")

LOW_STOCK_CHANCE = 0.15
LOW_STOCK_RANGE = (20, 30)
NORMAL_STOCK_RANGE = (200, 500)
FALLBACK_RATING_RANGE = (4.0, 4.8)
SKU_ATTEMPTS = 10


class ProductTransformer:
    """
    Row-to-product transform that remembers the SKUs it has issued.

    All synthetic values come from ``rng`` so a seeded ``random.Random``
    reproduces a run.
    """

    def __init__(
        self,
        exchange_rate: float = 1.6,
        currency: str = "DZD",
        rng: Optional[random.Random] = None,
    ):
        self.exchange_rate = exchange_rate
        self.currency = currency
        self.rng = rng or random.Random()
        self.issued_skus: Set[str] = set()

    def convert_price(self, price_str: Optional[str]) -> int:
        """Source price string to whole target-currency units; 0 when unusable."""
        if not price_str:
            return 0
        cleaned = PRICE_NOISE.sub("", str(price_str))
        try:
            source_price = float(cleaned)
        except ValueError:
            return 0
        if not math.isfinite(source_price):
            return 0
        return round_half_up(source_price * self.exchange_rate)

    def calculate_rating(self, *star_counts) -> float:
        """
        Weighted mean of the 1..5 star buckets, one decimal.

        Products without any ratings get a random value in [4.0, 4.8].
        """
        counts = [_parse_count(value) for value in star_counts]
        total = sum(counts)
        if total == 0:
            return round_half_up(self.rng.uniform(*FALLBACK_RATING_RANGE), 1)
        weighted = sum(count * stars for stars, count in enumerate(counts, start=1))
        return round_half_up(weighted / total, 1)

    @staticmethod
    def clean_image_url(image_str: Optional[str]) -> str:
        if not image_str:
            return ""
        url = QUOTES.sub("", image_str).strip()
        if "," in url:
            url = url.split(",")[0].strip()
        if url and not url.startswith("http"):
            url = "https:" + url
        return url

    def generate_stock(self) -> int:
        if self.rng.random() < LOW_STOCK_CHANCE:
            return self.rng.randint(*LOW_STOCK_RANGE)
        return self.rng.randint(*NORMAL_STOCK_RANGE)

    def generate_sku(self, brand: Optional[str], model: Optional[str], category: str) -> str:
        """
        {BRA}-{CAT}-{MODL}-{nnn}; the suffix is redrawn when this run already
        issued the same SKU.
        """
        brand_code = (brand or "UNK")[:3].upper()
        category_code = category[:3].upper()
        model_code = NON_ALPHANUMERIC.sub("", model or "")[:4].upper()
        prefix = f"{brand_code}-{category_code}-{model_code}"

        sku = f"{prefix}-{self.rng.randint(0, 999):03d}"
        attempts = 1
        while sku in self.issued_skus and attempts < SKU_ATTEMPTS:
            sku = f"{prefix}-{self.rng.randint(0, 999):03d}"
            attempts += 1
        if sku in self.issued_skus:
            logger.warning(f"SKU {sku} reused after {SKU_ATTEMPTS} draws")
        self.issued_skus.add(sku)
        return sku

    @staticmethod
    def extract_description(row: Dict[str, Any], category: str) -> str:
        """
        Technical summary from the row's attributes, or a templated sentence.

        Attributes are looked up in the JSON ``other_info`` column first, then
        in the row's own columns.
        """
        attributes: Dict[str, Any] = {}
        if row.get("other_info"):
            try:
                attributes = validate_json(row["other_info"])
            except ValidationError:
                logger.debug(f"Unparsable other_info for {row.get('Model') or row.get('Product Name')}")

        specs = []
        for key, label in DESCRIPTION_ATTRIBUTES.get(category, []):
            value = attributes.get(key) or row.get(key)
            if value:
                specs.append(f"{value}{label}")
        if specs:
            return ", ".join(specs)

        brand = row.get("Brand") or "Premium"
        product_name = row.get("Product Name") or row.get("Model") or "Tech Product"
        return (
            f"{brand} {product_name} - High-quality {category.lower()} "
            f"with advanced features and reliable performance."
        )

    def transform_row(self, row: Dict[str, Any], source: CatalogSource) -> Optional[Dict[str, Any]]:
        """
        Build a product record, or None when the row must be skipped.
        """
        if not row.get("Product Name") and not row.get("Model"):
            return None

        price = self.convert_price(row.get("Price in India"))
        if price <= 0:
            return None

        category = source.category
        brand = row.get("Brand") or None
        return {
            "sku": self.generate_sku(brand, row.get("Model"), category),
            "title": row.get("Product Name") or row.get("Model") or f"{brand} {category}",
            "description": self.extract_description(row, category),
            "price": price,
            "currency": self.currency,
            "category": category,
            "department": source.department,
            "image": self.clean_image_url(row.get("Picture URL")),
            "stock": self.generate_stock(),
            "rating": self.calculate_rating(
                *(_star_column(row, stars) for stars in range(1, 6))
            ),
            "brand": brand or "Generic",
            "is_active": True,
        }


class ProductFileHandler:
    """
    Handler for processing one category CSV file.
    """

    def __init__(self, source: BaseSource, transformer: ProductTransformer):
        self.source = source
        self.transformer = transformer

    def process(self, catalog_source: CatalogSource) -> Dict[str, Any]:
        """
        Transform every row of the file up to the source's row cap.

        Returns:
            dict with the extracted ``products`` and row tallies

        Raises:
            SourceError: If the file cannot be read; nothing from it is kept
        """
        filename = catalog_source.filename
        logger.info(f"Processing {filename}...")
        logger.info(f"   Category: {catalog_source.category}")
        logger.info(f"   Department: {catalog_source.department}")

        products: List[Dict[str, Any]] = []
        rows_read = 0
        skipped = 0
        capped = 0

        for row in self.source.read_rows(filename):
            rows_read += 1

            if len(products) >= catalog_source.max_rows:
                capped += 1
                continue

            try:
                product = self.transformer.transform_row(row, catalog_source)
            except (ValueError, TypeError, KeyError, AttributeError) as e:
                logger.warning(f"   Row {rows_read} of {filename} is malformed: {e}")
                product = None

            if product is None:
                skipped += 1
                continue
            products.append(product)

        logger.info(
            f"   Processed {rows_read} rows, extracted {len(products)} valid products "
            f"({skipped} skipped, {capped} over the {catalog_source.max_rows} row cap)"
        )
        return {
            "products": products,
            "rows_read": rows_read,
            "skipped": skipped,
            "capped": capped,
        }


def _parse_count(value: Any) -> int:
    """Star bucket cell to an int; blanks and junk count as zero."""
    if value is None:
        return 0
    try:
        return max(int(float(str(value).replace(",", "").strip())), 0)
    except (ValueError, OverflowError):
        return 0


def _star_column(row: Dict[str, Any], stars: int) -> Any:
    return row.get(f"{stars} Stars") or row.get(f"{stars} stars")


