from __future__ import annotations

import datetime as dt
import logging
import math
from fractions import Fraction
from typing import Any, Dict, List, Optional, Sequence, Union

from sqlalchemy.ext.asyncio import AsyncSession

from furniture_api.core.exceptions import NotFoundError
from furniture_api.db.models.production import (
    STAGES,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_PENDING,
    Production,
)
from furniture_api.db.models.users import User
from furniture_api.repositories.orders import OrderRepository
from furniture_api.repositories.production import ProductionRepository
from furniture_api.services.base import BaseService

logger = logging.getLogger(__name__)

# Coarse estimate: every stage takes this many days.
DAYS_PER_STAGE = 2


def round_half_up(value: Union[Fraction, int, float]) -> int:
    """Round to the nearest integer, halves away from zero."""
    exact = Fraction(str(value)) if isinstance(value, float) else Fraction(value)
    magnitude = math.floor(abs(exact) + Fraction(1, 2))
    return magnitude if exact >= 0 else -magnitude


def summarize_tracking(productions: Sequence[Production], today: Optional[dt.date] = None) -> Dict[str, Any]:
    """
    Summarize the production jobs of one order.

    Returns a dict with ``stage_summary`` (one entry per stage, in workshop order)
    and ``overall`` (counts, progress percentage and estimated completion date).
    In-progress jobs count as half done.
    """
    today = today or dt.date.today()

    stage_summary: List[Dict[str, Any]] = []
    for stage in STAGES:
        at_stage = [p for p in productions if p.stage == stage]
        stage_summary.append(
            {
                "stage": stage,
                "in_progress": sum(1 for p in at_stage if p.status == STATUS_IN_PROGRESS),
                "completed": sum(1 for p in at_stage if p.status == STATUS_COMPLETED),
                "pending": sum(1 for p in at_stage if p.status == STATUS_PENDING),
            }
        )

    total = len(productions)
    completed = sum(1 for p in productions if p.status == STATUS_COMPLETED)
    in_progress = sum(1 for p in productions if p.status == STATUS_IN_PROGRESS)
    pending = sum(1 for p in productions if p.status == STATUS_PENDING)

    # exact arithmetic so .5 boundaries round up
    ratio = Fraction(2 * completed + in_progress, 2 * max(1, total))
    estimated_total_days = len(STAGES) * DAYS_PER_STAGE
    remaining_days = max(0, round_half_up(estimated_total_days * (1 - ratio)))

    return {
        "stage_summary": stage_summary,
        "overall": {
            "total": total,
            "completed": completed,
            "pending": pending,
            "in_progress": in_progress,
            "progress_pct": round_half_up(ratio * 100),
            "eta": today + dt.timedelta(days=remaining_days),
        },
    }


class TrackingService(BaseService):
    """Order tracking for customers."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.orders = OrderRepository(session)
        self.productions = ProductionRepository(session)

    # PUBLIC_INTERFACE
    async def track_order(self, user: User, order_id: int) -> Dict[str, Any]:
        """
        Build the tracking view of one of the user's orders.

        Raises:
            NotFoundError: the order does not exist or belongs to another user.
        """
        order = await self.orders.get_order_for_user(order_id, user.id)
        if order is None:
            raise NotFoundError("Order", order_id)
        productions = await self.productions.list_for_order(order.id)
        summary = summarize_tracking(productions)
        logger.debug(
            "Tracking for order %s: %s%% complete, eta %s",
            order.id,
            summary["overall"]["progress_pct"],
            summary["overall"]["eta"],
        )
        return {"order": order, "productions": productions, **summary}
