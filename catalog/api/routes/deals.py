"""Deal endpoints"""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from catalog.api.routes.products import check_price_range
from catalog.db.base import get_db_session
from catalog.ingestors.manager import IngestorManager
from catalog.services.deal_service import DealService
from catalog.schemas.deal import (
    DealCreate,
    DealListResponse,
    DealResponse,
    DealSeedResponse,
    DealUpdate,
)

logger = logging.getLogger(__name__)


deals_router = APIRouter(
    prefix="/deals",
    responses={
        404: {"description": "Not found"},
        500: {"description": "Internal server error"},
    },
)


def _list_response(deals, total: Optional[int] = None) -> DealListResponse:
    return DealListResponse(count=len(deals), total=total, data=deals)


def _not_found(deal_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Deal with id {deal_id} not found",
    )


@deals_router.get(
    "",
    response_model=DealListResponse,
    summary="List deals",
    description="List active deals; ``active_now`` keeps only deals whose window contains the current time.",
)
async def list_deals(
    department: Optional[str] = None,
    active_now: bool = False,
    include_inactive: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db_session),
):
    filters = {"department": department, "include_inactive": include_inactive}
    if active_now:
        filters["running_at"] = datetime.now(timezone.utc)
    service = DealService(db)
    deals = service.list_deals(filters, skip, limit)
    return _list_response(deals, total=service.count_deals(filters))


@deals_router.post(
    "",
    response_model=DealResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a deal",
)
async def create_deal(deal_data: DealCreate, db: Session = Depends(get_db_session)):
    deal = DealService(db).create_deal(deal_data)
    return DealResponse(data=deal)


@deals_router.post(
    "/seed",
    response_model=DealSeedResponse,
    summary="Regenerate deals",
    description="Replace every deal with a fresh set generated from eligible products.",
)
async def seed_deals(
    target: Optional[int] = Query(None, ge=1, description="Number of deals to generate"),
    db: Session = Depends(get_db_session),
):
    result = IngestorManager(session_factory=lambda: db).create_deals(target)
    if result["status"] != "success":
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Deal generation failed: {result.get('error_message')}",
        )
    return DealSeedResponse(result=result)


@deals_router.get("/stats", summary="Deal statistics")
async def get_deal_stats(db: Session = Depends(get_db_session)):
    stats = DealService(db).get_stats()
    return {"success": True, "data": stats}


@deals_router.get("/search/{term}", response_model=DealListResponse)
async def search_deals(
    term: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db_session),
):
    """Case-insensitive match against deal title and descriptions"""
    if not term.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Search term cannot be empty",
        )
    deals = DealService(db).search_deals(term, skip, limit)
    return _list_response(deals)


@deals_router.get("/department/{department}", response_model=DealListResponse)
async def list_by_department(
    department: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db_session),
):
    deals = DealService(db).list_deals({"department": department}, skip, limit)
    return _list_response(deals)


@deals_router.get("/product/{product_id}", response_model=DealListResponse)
async def list_by_product(product_id: int, db: Session = Depends(get_db_session)):
    deals = DealService(db).list_deals({"product_id": product_id})
    return _list_response(deals)


@deals_router.get("/price/{min_price}/{max_price}", response_model=DealListResponse)
async def list_by_price_range(
    min_price: int,
    max_price: int,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db_session),
):
    check_price_range(min_price, max_price)
    deals = DealService(db).list_deals(
        {"price_min": min_price, "price_max": max_price}, skip, limit
    )
    return _list_response(deals)


@deals_router.get("/top-rated", response_model=DealListResponse)
async def list_top_rated(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db_session),
):
    deals = DealService(db).list_top_rated(limit)
    return _list_response(deals)


@deals_router.get("/recent", response_model=DealListResponse)
async def list_recent(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db_session),
):
    deals = DealService(db).list_recent(limit)
    return _list_response(deals)


@deals_router.get("/{deal_id}", response_model=DealResponse)
async def get_deal(deal_id: int, db: Session = Depends(get_db_session)):
    deal = DealService(db).get_deal(deal_id)
    if not deal:
        raise _not_found(deal_id)
    return DealResponse(data=deal)


@deals_router.put("/{deal_id}", response_model=DealResponse)
async def update_deal(
    deal_id: int,
    deal_data: DealUpdate,
    db: Session = Depends(get_db_session),
):
    try:
        deal = DealService(db).update_deal(deal_id, deal_data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not deal:
        raise _not_found(deal_id)
    return DealResponse(data=deal)


@deals_router.delete("/{deal_id}", response_model=DealResponse)
async def deactivate_deal(deal_id: int, db: Session = Depends(get_db_session)):
    """Soft delete: the deal is kept with ``is_active`` set to false"""
    deal = DealService(db).deactivate_deal(deal_id)
    if not deal:
        raise _not_found(deal_id)
    return DealResponse(data=deal)


@deals_router.patch("/{deal_id}/restore", response_model=DealResponse)
async def restore_deal(deal_id: int, db: Session = Depends(get_db_session)):
    deal = DealService(db).restore_deal(deal_id)
    if not deal:
        raise _not_found(deal_id)
    return DealResponse(data=deal)


@deals_router.delete("/{deal_id}/hard-delete")
async def delete_deal(deal_id: int, db: Session = Depends(get_db_session)):
    if not DealService(db).delete_deal(deal_id):
        raise _not_found(deal_id)
    return {"success": True, "message": f"Deal {deal_id} permanently deleted"}
