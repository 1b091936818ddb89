"""Product catalog endpoints"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from catalog.db.base import get_db_session
from catalog.services.product_service import (
    DuplicateSkuError,
    LOW_STOCK_THRESHOLD,
    ProductService,
)
from catalog.schemas.product import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    StockUpdate,
)

logger = logging.getLogger(__name__)


products_router = APIRouter(
    prefix="/products",
    responses={
        404: {"description": "Not found"},
        500: {"description": "Internal server error"},
    },
)

categories_router = APIRouter()


def _list_response(products, total: Optional[int] = None) -> ProductListResponse:
    return ProductListResponse(count=len(products), total=total, data=products)


def _not_found(product_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Product with id {product_id} not found",
    )


def check_price_range(min_price: Optional[int], max_price: Optional[int]) -> None:
    if min_price is not None and min_price < 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="min_price cannot be negative",
        )
    if min_price is not None and max_price is not None and min_price > max_price:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="min_price cannot be greater than max_price",
        )


@products_router.get(
    "",
    response_model=ProductListResponse,
    summary="List products",
    description="List active products with optional filters and pagination.",
)
async def list_products(
    department: Optional[str] = None,
    category: Optional[str] = None,
    brand: Optional[str] = None,
    min_price: Optional[int] = Query(None, description="Inclusive lower price bound"),
    max_price: Optional[int] = Query(None, description="Inclusive upper price bound"),
    include_inactive: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db_session),
):
    check_price_range(min_price, max_price)
    filters = {
        "department": department,
        "category": category,
        "brand": brand,
        "price_min": min_price,
        "price_max": max_price,
        "include_inactive": include_inactive,
    }
    service = ProductService(db)
    products = service.list_products(filters, skip, limit)
    return _list_response(products, total=service.count_products(filters))


@products_router.get("/stats", summary="Product statistics")
async def get_product_stats(db: Session = Depends(get_db_session)):
    """Totals, averages and per-category / per-department counts"""
    stats = ProductService(db).get_stats()
    return {"success": True, "data": stats}


@products_router.get(
    "/search/{term}",
    response_model=ProductListResponse,
    summary="Search products",
)
async def search_products(
    term: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db_session),
):
    """
    Case-insensitive match against title, description, brand and SKU.
    """
    if not term.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Search term cannot be empty",
        )
    products = ProductService(db).search_products(term, skip, limit)
    return _list_response(products)


@products_router.get("/department/{department}", response_model=ProductListResponse)
async def list_by_department(
    department: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db_session),
):
    products = ProductService(db).list_products({"department": department}, skip, limit)
    return _list_response(products)


@products_router.get("/category/{category}", response_model=ProductListResponse)
async def list_by_category(
    category: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db_session),
):
    products = ProductService(db).list_products({"category": category}, skip, limit)
    return _list_response(products)


@products_router.get("/brand/{brand}", response_model=ProductListResponse)
async def list_by_brand(
    brand: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db_session),
):
    products = ProductService(db).list_products({"brand": brand}, skip, limit)
    return _list_response(products)


@products_router.get("/price/{min_price}/{max_price}", response_model=ProductListResponse)
async def list_by_price_range(
    min_price: int,
    max_price: int,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db_session),
):
    check_price_range(min_price, max_price)
    products = ProductService(db).list_products(
        {"price_min": min_price, "price_max": max_price}, skip, limit
    )
    return _list_response(products)


@products_router.get("/sku/{sku}", response_model=ProductResponse)
async def get_product_by_sku(sku: str, db: Session = Depends(get_db_session)):
    product = ProductService(db).get_by_sku(sku)
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with SKU {sku} not found",
        )
    return ProductResponse(data=product)


@products_router.get(
    "/inventory/low-stock",
    response_model=ProductListResponse,
    summary="Low stock products",
)
async def list_low_stock(
    threshold: int = Query(LOW_STOCK_THRESHOLD, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db_session),
):
    """Active products with stock below ``threshold``, lowest first"""
    products = ProductService(db).list_low_stock(threshold, limit)
    return _list_response(products)


@products_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, db: Session = Depends(get_db_session)):
    product = ProductService(db).get_product(product_id)
    if not product:
        raise _not_found(product_id)
    return ProductResponse(data=product)


@products_router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
async def create_product(product_data: ProductCreate, db: Session = Depends(get_db_session)):
    try:
        product = ProductService(db).create_product(product_data)
    except DuplicateSkuError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return ProductResponse(data=product)


@products_router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: Session = Depends(get_db_session),
):
    try:
        product = ProductService(db).update_product(product_id, product_data)
    except DuplicateSkuError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if not product:
        raise _not_found(product_id)
    return ProductResponse(data=product)


@products_router.delete("/{product_id}", response_model=ProductResponse)
async def deactivate_product(product_id: int, db: Session = Depends(get_db_session)):
    """Soft delete: the product is kept with ``is_active`` set to false"""
    product = ProductService(db).deactivate_product(product_id)
    if not product:
        raise _not_found(product_id)
    return ProductResponse(data=product)


@products_router.patch("/{product_id}/stock", response_model=ProductResponse)
async def update_stock(
    product_id: int,
    stock_update: StockUpdate,
    db: Session = Depends(get_db_session),
):
    product = ProductService(db).update_stock(product_id, stock_update.stock)
    if not product:
        raise _not_found(product_id)
    return ProductResponse(data=product)


@products_router.patch("/{product_id}/restore", response_model=ProductResponse)
async def restore_product(product_id: int, db: Session = Depends(get_db_session)):
    product = ProductService(db).restore_product(product_id)
    if not product:
        raise _not_found(product_id)
    return ProductResponse(data=product)


@products_router.delete("/{product_id}/hard-delete")
async def delete_product(product_id: int, db: Session = Depends(get_db_session)):
    """Permanently remove a product"""
    if not ProductService(db).delete_product(product_id):
        raise _not_found(product_id)
    return {"success": True, "message": f"Product {product_id} permanently deleted"}


@categories_router.get("/categories", summary="List product categories")
async def list_categories(db: Session = Depends(get_db_session)):
    categories = ProductService(db).list_categories()
    return {"success": True, "count": len(categories), "data": categories}
