# catalog/core/taxonomy.py
"""
Lookup tables shared by the import and deal pipelines.
"""
from typing import Dict, List, NamedTuple, Tuple


class CatalogSource(NamedTuple):
    """One category CSV file and how its rows are labelled."""

    filename: str
    category: str
    department: str
    max_rows: int


DEFAULT_MAX_ROWS = 80

# Import order is the order below
DEFAULT_SOURCES: Tuple[CatalogSource, ...] = (
    CatalogSource("laptops.csv", "Laptops", "Computers", DEFAULT_MAX_ROWS),
    CatalogSource("mobiles.csv", "Smartphones", "Mobile Devices", 150),
    CatalogSource("cameras.csv", "Cameras", "Photography", DEFAULT_MAX_ROWS),
    CatalogSource(
        "headphones_and_speakers.csv", "Headphones & Speakers", "Audio", DEFAULT_MAX_ROWS
    ),
    CatalogSource("gaming_consoles.csv", "Gaming Consoles", "Gaming", DEFAULT_MAX_ROWS),
    CatalogSource("tablets.csv", "Tablets", "Mobile Devices", DEFAULT_MAX_ROWS),
    CatalogSource("televisions.csv", "Smart TVs", "Displays", DEFAULT_MAX_ROWS),
    CatalogSource("wearables.csv", "Smart Watches", "Wearables", DEFAULT_MAX_ROWS),
)

# Inclusive discount percentage bounds before the price-tier bonus
DISCOUNT_RANGES: Dict[str, Tuple[int, int]] = {
    "Smartphones": (10, 25),
    "Laptops": (15, 30),
    "Gaming Consoles": (5, 15),
    "Cameras": (20, 40),
    "Smart TVs": (25, 45),
    "Tablets": (15, 35),
    "Smart Watches": (20, 40),
    "Headphones & Speakers": (30, 50),
}
DEFAULT_DISCOUNT_RANGE: Tuple[int, int] = (15, 30)
MAX_DISCOUNT = 50

# (price above, extra points on the upper bound), checked in order
PRICE_TIER_BONUSES: Tuple[Tuple[int, int], ...] = (
    (100000, 10),
    (50000, 5),
)

DEAL_PHRASES: List[str] = [
    "Flash Sale",
    "Limited Time Offer",
    "Special Deal",
    "Hot Deal",
    "Best Price",
    "Mega Sale",
    "Weekend Special",
    "Tech Deal",
    "Super Saver",
    "Exclusive Offer",
]

CATEGORY_DEAL_PHRASES: Dict[str, List[str]] = {
    "Smartphones": ["Phone Deal", "Mobile Offer", "Smartphone Sale"],
    "Laptops": ["Laptop Deal", "Computer Sale", "Notebook Offer"],
    "Gaming Consoles": ["Gaming Deal", "Console Sale", "Gamer Special"],
    "Cameras": ["Camera Deal", "Photo Gear Sale", "Photographer Special"],
    "Smart TVs": ["TV Deal", "Entertainment Sale", "Smart TV Offer"],
    "Tablets": ["Tablet Deal", "Mobile Computing Sale"],
    "Smart Watches": ["Wearable Deal", "Smartwatch Sale", "Fitness Tech"],
    "Headphones & Speakers": ["Audio Deal", "Sound Sale", "Music Gear"],
}

# Description attributes per category: (attribute name, label appended after the value)
DESCRIPTION_ATTRIBUTES: Dict[str, List[Tuple[str, str]]] = {
    "Smartphones": [
        ("RAM", " RAM"),
        ("Internal storage", " Storage"),
        ("Rear camera", " Camera"),
    ],
    "Laptops": [
        ("RAM", " RAM"),
        ("Processor", " Processor"),
        ("Operating system", ""),
    ],
}
