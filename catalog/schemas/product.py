# catalog/schemas/product.py
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional, Dict
from datetime import datetime


class ProductBase(BaseModel):
    """Base Pydantic model for Product data"""

    sku: str = Field(..., min_length=1, description="Stock keeping unit")
    title: str = Field(..., min_length=1)
    description: Optional[str] = Field(None, description="Product description")
    price: int = Field(..., gt=0, description="Price in whole currency units")
    currency: str = Field("DZD", min_length=3, max_length=3, description="Currency code")
    category: str
    department: str
    image: str = Field("", description="Product image URL")
    stock: int = Field(0, ge=0, description="Units in stock")
    rating: float = Field(..., ge=1.0, le=5.0)
    brand: str = "Generic"
    is_active: bool = True


class ProductCreate(ProductBase):
    """Schema for creating a new Product"""

    pass


class ProductUpdate(BaseModel):
    """Schema for updating a Product (all fields optional)"""

    sku: Optional[str] = Field(None, min_length=1)
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[int] = Field(None, gt=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    category: Optional[str] = None
    department: Optional[str] = None
    image: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)
    rating: Optional[float] = Field(None, ge=1.0, le=5.0)
    brand: Optional[str] = None
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def reject_null_required(self):
        # description is the only nullable column
        for name in sorted(self.model_fields_set - {"description"}):
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class StockUpdate(BaseModel):
    """Schema for the stock adjustment endpoint"""

    stock: int = Field(..., ge=0)


class ProductInDB(ProductBase):
    """Schema for Product as stored in DB (includes DB fields)"""

    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ProductResponse(BaseModel):
    """Single product envelope"""

    success: bool = True
    data: ProductInDB


class ProductListResponse(BaseModel):
    """Product collection envelope"""

    success: bool = True
    count: int
    total: Optional[int] = Field(None, description="Matches before pagination")
    data: List[ProductInDB]


class ProductStats(BaseModel):
    """Aggregate figures for the product collection"""

    total_products: int
    active_products: int
    inactive_products: int
    average_price: float
    average_rating: float
    low_stock_products: int
    by_category: Dict[str, int]
    by_department: Dict[str, int]
