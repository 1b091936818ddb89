# catalog/services/deal_service.py
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
import logging
from catalog.db.repositories.deal_repository import DealRepository
from catalog.db.models.deal import Deal
from catalog.schemas.deal import (
    DealCreate,
    DealUpdate,
    DealInDB,
    DealStats,
    DepartmentDealStats,
    check_deal_terms,
)

logger = logging.getLogger(__name__)


class DealService:
    """Service for deal-related business logic"""

    def __init__(self, db_session):
        self.db_session = db_session
        self.deal_repo = DealRepository(db_session)

    def get_deal(self, deal_id: int) -> Optional[DealInDB]:
        """Get deal by ID"""
        deal = self.deal_repo.get_by_id(deal_id)
        if not deal:
            return None
        return DealInDB.model_validate(deal)

    def list_deals(
        self, filters: Optional[Dict[str, Any]] = None, skip: int = 0, limit: int = 100
    ) -> List[DealInDB]:
        deals = self.deal_repo.list_by_filter(filters or {}, skip, limit)
        return [DealInDB.model_validate(d) for d in deals]

    def count_deals(self, filters: Optional[Dict[str, Any]] = None) -> int:
        return self.deal_repo.count_by_filter(filters or {})

    def search_deals(self, term: str, skip: int = 0, limit: int = 100) -> List[DealInDB]:
        deals = self.deal_repo.search(term.strip(), skip, limit)
        return [DealInDB.model_validate(d) for d in deals]

    def list_top_rated(self, limit: int = 10) -> List[DealInDB]:
        deals = self.deal_repo.list_by_filter(
            {}, 0, limit, order_by=(Deal.rating.desc(), Deal.discount.desc(), Deal.id)
        )
        return [DealInDB.model_validate(d) for d in deals]

    def list_recent(self, limit: int = 10) -> List[DealInDB]:
        """Most recently started deals that have already begun"""
        now = datetime.now(timezone.utc)
        deals = self.deal_repo.list_by_filter(
            {"running_at": now}, 0, limit, order_by=(Deal.start_date.desc(), Deal.id)
        )
        return [DealInDB.model_validate(d) for d in deals]

    def get_stats(self) -> DealStats:
        now = datetime.now(timezone.utc)
        return DealStats(
            total_deals=self.deal_repo.count(),
            active_deals=self.deal_repo.count_active(),
            running_now=self.deal_repo.count_running(now),
            upcoming=self.deal_repo.count_upcoming(now),
            expired=self.deal_repo.count_expired(now),
            by_department=[
                DepartmentDealStats(
                    department=department,
                    count=count,
                    average_discount=round(avg_discount, 1),
                    average_savings=round(avg_savings, 0),
                )
                for department, count, avg_discount, avg_savings in self.deal_repo.department_breakdown()
            ],
        )

    def create_deal(self, deal_data: DealCreate) -> DealInDB:
        deal = self.deal_repo.create(deal_data)
        logger.info(f"Created deal {deal.id} for product {deal.product_id}")
        return DealInDB.model_validate(deal)

    def update_deal(self, deal_id: int, deal_data: DealUpdate) -> Optional[DealInDB]:
        """
        Update an existing deal.

        Raises:
            ValueError: If the merged deal would have an inverted window or a
                price that does not match its discount
        """
        current = self.deal_repo.get_by_id(deal_id)
        if not current:
            return None

        changes = deal_data.model_dump(exclude_unset=True)
        merged = {
            name: changes.get(name, getattr(current, name))
            for name in ("price", "original_price", "discount", "start_date", "end_date")
        }
        check_deal_terms(**merged)

        deal = self.deal_repo.update(deal_id, deal_data)
        return DealInDB.model_validate(deal)

    def deactivate_deal(self, deal_id: int) -> Optional[DealInDB]:
        deal = self.deal_repo.set_fields(deal_id, is_active=False)
        if not deal:
            return None
        logger.info(f"Deactivated deal {deal_id}")
        return DealInDB.model_validate(deal)

    def restore_deal(self, deal_id: int) -> Optional[DealInDB]:
        deal = self.deal_repo.set_fields(deal_id, is_active=True)
        if not deal:
            return None
        logger.info(f"Restored deal {deal_id}")
        return DealInDB.model_validate(deal)

    def delete_deal(self, deal_id: int) -> bool:
        deleted = self.deal_repo.delete(deal_id)
        if deleted:
            logger.info(f"Hard-deleted deal {deal_id}")
        return deleted

