# catalog/ingestors/handlers/deals.py
"""
Handler for selecting products and synthesizing promotional deals.
"""
import random
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from catalog.core.taxonomy import (
    CATEGORY_DEAL_PHRASES,
    DEAL_PHRASES,
    DEFAULT_DISCOUNT_RANGE,
    DISCOUNT_RANGES,
    MAX_DISCOUNT,
    PRICE_TIER_BONUSES,
)
from catalog.core import pricing
from catalog.core.logging import get_logger

logger = get_logger(__name__)

# Eligibility thresholds for deal candidates
MIN_STOCK = 30
MIN_RATING = 3.5
MIN_PRICE = 1000

# Categories too small for a proportional share still get this many deals
MIN_CATEGORY_DEALS = 3

DEAL_TYPES = ("current", "starting_soon", "ending_soon", "future")

THUMBNAIL_CDN = "gadgets360cdn.com"
MAX_TITLE_LENGTH = 40


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DealGenerator:
    """
    Builds deal records from product records.

    ``rng`` drives every random choice and ``clock`` supplies "now", so a
    seeded generator with a fixed clock is fully deterministic.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = _utcnow,
        currency: str = "DZD",
    ):
        self.rng = rng or random.Random()
        self.clock = clock
        self.currency = currency

    # Selection

    @staticmethod
    def is_eligible(product: Dict[str, Any]) -> bool:
        return bool(
            product.get("is_active")
            and (product.get("stock") or 0) >= MIN_STOCK
            and (product.get("rating") or 0) >= MIN_RATING
            and (product.get("price") or 0) >= MIN_PRICE
            and product.get("image")
        )

    def select_products_for_deals(
        self, products: List[Dict[str, Any]], target_deals: int = 150
    ) -> List[Dict[str, Any]]:
        """
        Sample up to ``target_deals`` eligible products, proportionally by
        category.

        Each category gets floor(target * share); a category whose share
        rounds to zero still gets up to MIN_CATEGORY_DEALS.
        """
        by_category: "OrderedDict[str, List[Dict[str, Any]]]" = OrderedDict()
        for product in sorted(
            (p for p in products if self.is_eligible(p)), key=lambda p: p["category"]
        ):
            by_category.setdefault(product["category"], []).append(product)

        total_available = sum(len(group) for group in by_category.values())
        logger.info("Products available for deals by category:")
        for category, group in by_category.items():
            logger.info(f"   {category}: {len(group)} products")

        if total_available == 0 or target_deals <= 0:
            return []

        selected: List[Dict[str, Any]] = []
        for category, group in by_category.items():
            category_deals = target_deals * len(group) // total_available
            if category_deals == 0:
                category_deals = min(MIN_CATEGORY_DEALS, len(group))

            shuffled = list(group)
            self.rng.shuffle(shuffled)
            picked = shuffled[: min(category_deals, len(group))]
            selected.extend(picked)
            logger.info(f"   {category}: Selected {len(picked)} products for deals")

        logger.info(f"Total products selected: {len(selected)}")
        return selected[:target_deals]

    # Pricing

    def discount_range(self, category: str, price: int) -> Tuple[int, int]:
        low, high = DISCOUNT_RANGES.get(category, DEFAULT_DISCOUNT_RANGE)
        for threshold, bonus in PRICE_TIER_BONUSES:
            if price > threshold:
                high += bonus
                break
        return low, min(high, MAX_DISCOUNT)

    def generate_discount(self, category: str, price: int) -> int:
        low, high = self.discount_range(category, price)
        return self.rng.randint(low, high)

    @staticmethod
    def deal_price(original_price: int, discount: int) -> int:
        return pricing.deal_price(original_price, discount)

    # Timing

    def generate_deal_dates(self, deal_type: Optional[str] = None) -> Tuple[str, datetime, datetime]:
        """
        Pick a lifecycle archetype and draw its window.

        Returns:
            (deal type, start date, end date)
        """
        now = self.clock()
        if deal_type is None:
            deal_type = self.rng.choice(DEAL_TYPES)

        def days(low: float, high: float) -> timedelta:
            return timedelta(days=self.rng.uniform(low, high))

        if deal_type == "current":
            start_date = now - days(1, 11)
            end_date = now + days(5, 20)
        elif deal_type == "starting_soon":
            start_date = now + days(1, 3)
            end_date = start_date + days(7, 14)
        elif deal_type == "ending_soon":
            start_date = now - days(5, 15)
            end_date = now + days(1, 3)
        elif deal_type == "future":
            start_date = now + days(3, 10)
            end_date = start_date + days(7, 21)
        else:
            raise ValueError(f"Unknown deal type: {deal_type}")

        return deal_type, start_date, end_date

    # Copy

    def create_deal_title(self, product_title: str, discount: int, category: str) -> str:
        phrases = DEAL_PHRASES + CATEGORY_DEAL_PHRASES.get(category, [])
        phrase = self.rng.choice(phrases)
        if len(product_title) > MAX_TITLE_LENGTH:
            short_title = product_title[: MAX_TITLE_LENGTH - 3] + "..."
        else:
            short_title = product_title
        return f"{phrase}: {short_title} - {discount}% OFF"

    def create_deal_description(
        self, product: Dict[str, Any], discount: int, original_price: int, deal_price: int
    ) -> str:
        savings = f"{original_price - deal_price:,} {self.currency}"
        category = product["category"].lower()
        brand = product.get("brand") or "Generic"
        descriptions = [
            f"Get this amazing {category} at an unbeatable price! Save {savings} with our exclusive {discount}% discount.",
            f"Limited time offer on this premium {brand} {category}. Don't miss out on {discount}% savings!",
            f"Special deal alert! This top-rated {category} is now available with a massive {discount}% discount. Save {savings} today!",
            f"Exclusive offer: {brand} quality at an incredible price. Get {discount}% off this popular {category}.",
            f"Hot deal! Premium {category} with excellent ratings now available with {discount}% off. Limited stock available!",
        ]
        return self.rng.choice(descriptions)

    def create_short_description(self, product: Dict[str, Any], discount: int) -> str:
        category = product["category"].lower()
        brand = product.get("brand") or "Generic"
        short_descriptions = [
            f"{discount}% off {brand} {category}",
            f"Save big on this {category}",
            f"Limited time {discount}% discount",
            f"Premium {category} deal",
            f"Exclusive {discount}% off offer",
        ]
        return self.rng.choice(short_descriptions)

    @staticmethod
    def generate_thumbnail(image_url: Optional[str]) -> str:
        """Smaller rendition for the known CDN; other URLs are returned as-is."""
        if not image_url:
            return ""
        if THUMBNAIL_CDN in image_url:
            return image_url.replace("large", "small").replace(
                "?downsize=*:180", "?downsize=*:120"
            )
        return image_url

    def build_deal(self, product: Dict[str, Any]) -> Dict[str, Any]:
        original_price = product["price"]
        discount = self.generate_discount(product["category"], original_price)
        price = self.deal_price(original_price, discount)
        _, start_date, end_date = self.generate_deal_dates()

        return {
            "product_id": product["id"],
            "variant_sku": product["sku"],
            "department": product["department"],
            "thumbnail": self.generate_thumbnail(product.get("image")),
            "image": product.get("image") or "",
            "title": self.create_deal_title(product["title"], discount, product["category"]),
            "description": self.create_deal_description(product, discount, original_price, price),
            "short_description": self.create_short_description(product, discount),
            "price": price,
            "original_price": original_price,
            "currency": product.get("currency") or self.currency,
            "rating": product.get("rating"),
            "discount": discount,
            "is_active": True,
            "start_date": start_date,
            "end_date": end_date,
            "last_updated": self.clock(),
        }

    def generate(self, products: List[Dict[str, Any]], target_deals: int = 150) -> List[Dict[str, Any]]:
        """Select candidates and build one deal per selected product."""
        selected = self.select_products_for_deals(products, target_deals)
        return [self.build_deal(product) for product in selected]
