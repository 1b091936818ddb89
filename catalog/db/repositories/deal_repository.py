# catalog/db/repositories/deal_repository.py
from typing import List, Optional, Dict, Any, Tuple
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import or_, func
from catalog.db.models.deal import Deal
from catalog.schemas.deal import DealCreate, DealUpdate


class DealRepository:
    """Repository for CRUD operations on Deal model"""

    def __init__(self, db_session: Session):
        self.db_session = db_session

    def get_by_id(self, deal_id: int) -> Optional[Deal]:
        """Get deal by ID"""
        return self.db_session.query(Deal).filter(Deal.id == deal_id).first()

    def _filtered(self, filters: Dict[str, Any]):
        query = self.db_session.query(Deal)

        if not filters.get("include_inactive"):
            query = query.filter(Deal.is_active.is_(True))

        if filters.get("department") is not None:
            query = query.filter(Deal.department == filters["department"])

        if filters.get("product_id") is not None:
            query = query.filter(Deal.product_id == filters["product_id"])

        if filters.get("price_min") is not None:
            query = query.filter(Deal.price >= filters["price_min"])

        if filters.get("price_max") is not None:
            query = query.filter(Deal.price <= filters["price_max"])

        if filters.get("running_at") is not None:
            moment = filters["running_at"]
            query = query.filter(Deal.start_date <= moment, Deal.end_date >= moment)

        return query

    def list_by_filter(
        self,
        filters: Dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        order_by=None,
    ) -> List[Deal]:
        """
        List deals with flexible filtering.

        Filters can include:
        - department, product_id: exact match
        - price_min / price_max: inclusive bounds on the discounted price
        - running_at: datetime that must fall inside the deal window
        - include_inactive: also return soft-deleted deals
        """
        query = self._filtered(filters)
        if order_by is not None:
            query = query.order_by(*order_by)
        else:
            query = query.order_by(Deal.id)
        return query.offset(skip).limit(limit).all()

    def count_by_filter(self, filters: Dict[str, Any]) -> int:
        return self._filtered(filters).count()

    def count(self) -> int:
        return self.db_session.query(func.count(Deal.id)).scalar() or 0

    def search(self, term: str, skip: int = 0, limit: int = 100) -> List[Deal]:
        search_term = f"%{term}%"
        return (
            self.db_session.query(Deal)
            .filter(
                Deal.is_active.is_(True),
                or_(
                    Deal.title.ilike(search_term),
                    Deal.description.ilike(search_term),
                    Deal.short_description.ilike(search_term),
                    Deal.variant_sku.ilike(search_term),
                ),
            )
            .order_by(Deal.discount.desc(), Deal.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_running(self, moment: datetime) -> int:
        return (
            self.db_session.query(func.count(Deal.id))
            .filter(Deal.start_date <= moment, Deal.end_date >= moment)
            .scalar()
            or 0
        )

    def count_upcoming(self, moment: datetime) -> int:
        return (
            self.db_session.query(func.count(Deal.id))
            .filter(Deal.start_date > moment)
            .scalar()
            or 0
        )

    def count_expired(self, moment: datetime) -> int:
        return (
            self.db_session.query(func.count(Deal.id))
            .filter(Deal.end_date < moment)
            .scalar()
            or 0
        )

    def count_active(self) -> int:
        return (
            self.db_session.query(func.count(Deal.id))
            .filter(Deal.is_active.is_(True))
            .scalar()
            or 0
        )

    def department_breakdown(self) -> List[Tuple[str, int, float, float]]:
        """(department, count, average discount, average savings), largest first"""
        rows = (
            self.db_session.query(
                Deal.department,
                func.count(Deal.id),
                func.avg(Deal.discount),
                func.avg(Deal.original_price - Deal.price),
            )
            .group_by(Deal.department)
            .order_by(func.count(Deal.id).desc(), Deal.department)
            .all()
        )
        return [
            (department, count, float(avg_discount or 0), float(avg_savings or 0))
            for department, count, avg_discount, avg_savings in rows
        ]

    def create(self, deal_data: DealCreate) -> Deal:
        """Create a new deal"""
        db_deal = Deal(**deal_data.model_dump())
        self.db_session.add(db_deal)
        self.db_session.commit()
        self.db_session.refresh(db_deal)
        return db_deal

    def update(self, deal_id: int, deal_data: DealUpdate) -> Optional[Deal]:
        """Update an existing deal"""
        db_deal = self.get_by_id(deal_id)

        if not db_deal:
            return None

        for key, value in deal_data.model_dump(exclude_unset=True).items():
            setattr(db_deal, key, value)

        self.db_session.commit()
        self.db_session.refresh(db_deal)
        return db_deal

    def set_fields(self, deal_id: int, **fields) -> Optional[Deal]:
        db_deal = self.get_by_id(deal_id)
        if not db_deal:
            return None
        for key, value in fields.items():
            setattr(db_deal, key, value)
        self.db_session.commit()
        self.db_session.refresh(db_deal)
        return db_deal

    def delete(self, deal_id: int) -> bool:
        """Delete a deal by ID"""
        db_deal = self.get_by_id(deal_id)

        if not db_deal:
            return False

        self.db_session.delete(db_deal)
        self.db_session.commit()
        return True

    def delete_all(self) -> int:
        deleted = self.db_session.query(Deal).delete(synchronize_session=False)
        self.db_session.commit()
        return deleted

    def bulk_insert(self, records: List[Dict[str, Any]]) -> int:
        """Insert a batch in one transaction; rolls back and re-raises on failure"""
        try:
            self.db_session.add_all([Deal(**record) for record in records])
            self.db_session.commit()
        except Exception:
            self.db_session.rollback()
            raise
        return len(records)

    def sample(self, limit: int = 3) -> List[Deal]:
        return self.db_session.query(Deal).order_by(Deal.id).limit(limit).all()
