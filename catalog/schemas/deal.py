# catalog/schemas/deal.py
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone

from catalog.core.pricing import deal_price

# Columns an update may clear
NULLABLE_UPDATE_FIELDS = {"description", "short_description", "rating"}


def as_utc(moment: datetime) -> datetime:
    """Naive datetimes are taken to be UTC"""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def check_deal_terms(
    price: int, original_price: int, discount: int, start_date: datetime, end_date: datetime
) -> None:
    """
    Raise ValueError unless the window is ordered and the price matches the discount.
    """
    if as_utc(start_date) >= as_utc(end_date):
        raise ValueError("start_date must be before end_date")
    expected = deal_price(original_price, discount)
    if price != expected:
        raise ValueError(
            f"price must be {expected} for {discount}% off {original_price}, got {price}"
        )


class DealBase(BaseModel):
    """Base Pydantic model for Deal data"""

    product_id: int = Field(..., description="Product this deal promotes")
    variant_sku: str = Field(..., description="SKU of the product at generation time")
    department: str
    thumbnail: str = ""
    image: str = ""
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    short_description: Optional[str] = None
    price: int = Field(..., gt=0, description="Discounted price")
    original_price: int = Field(..., gt=0)
    currency: str = Field("DZD", min_length=3, max_length=3)
    rating: Optional[float] = Field(None, ge=1.0, le=5.0)
    discount: int = Field(..., gt=0, le=50, description="Discount percentage")
    is_active: bool = True
    start_date: datetime
    end_date: datetime


class DealCreate(DealBase):
    """Schema for creating a new Deal"""

    @model_validator(mode="after")
    def check_terms(self):
        check_deal_terms(
            self.price, self.original_price, self.discount, self.start_date, self.end_date
        )
        return self


class DealUpdate(BaseModel):
    """Schema for updating a Deal (all fields optional)"""

    department: Optional[str] = None
    thumbnail: Optional[str] = None
    image: Optional[str] = None
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    short_description: Optional[str] = None
    price: Optional[int] = Field(None, gt=0)
    original_price: Optional[int] = Field(None, gt=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    rating: Optional[float] = Field(None, ge=1.0, le=5.0)
    discount: Optional[int] = Field(None, gt=0, le=50)
    is_active: Optional[bool] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @model_validator(mode="after")
    def reject_null_required(self):
        for name in sorted(self.model_fields_set - NULLABLE_UPDATE_FIELDS):
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class DealInDB(DealBase):
    """Schema for Deal as stored in DB (includes DB fields)"""

    id: int
    last_updated: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DealResponse(BaseModel):
    success: bool = True
    data: DealInDB


class DealListResponse(BaseModel):
    success: bool = True
    count: int
    total: Optional[int] = Field(None, description="Matches before pagination")
    data: List[DealInDB]


class DepartmentDealStats(BaseModel):
    department: str
    count: int
    average_discount: float
    average_savings: float


class DealStats(BaseModel):
    """Aggregate figures for the deal collection"""

    total_deals: int
    active_deals: int
    running_now: int
    upcoming: int
    expired: int
    by_department: List[DepartmentDealStats]


class DealSeedResponse(BaseModel):
    success: bool = True
    result: Dict[str, Any]
