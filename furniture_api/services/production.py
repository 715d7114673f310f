from __future__ import annotations

import datetime as dt
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from furniture_api.core.exceptions import NotFoundError
from furniture_api.db.models.production import Production
from furniture_api.db.models.users import User
from furniture_api.repositories.catalog import ProductRepository
from furniture_api.repositories.orders import OrderRepository
from furniture_api.repositories.production import NO_FILTERS, ProductionFilters, ProductionRepository
from furniture_api.schemas.production import ProductionAnalytics, ProductionCreate, ProductionUpdate
from furniture_api.services.base import BaseService

logger = logging.getLogger(__name__)


class ProductionService(BaseService):
    """
    Domain service for workshop production jobs.

    Jobs are created automatically at checkout; staff can also add manual jobs,
    move jobs between stages and read aggregated counts.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = ProductionRepository(session)
        self.orders = OrderRepository(session)
        self.products = ProductRepository(session)

    # PUBLIC_INTERFACE
    async def create_production(self, payload: ProductionCreate, user: User) -> Production:
        """
        Create a manual production job.

        Parameters:
            payload: ProductionCreate request
            user: employee recording the job
        Raises:
            NotFoundError: order_id or product_id names a row that does not exist.
        Returns:
            Created Production entity
        """
        if payload.order_id is not None and await self.orders.get_order(payload.order_id) is None:
            raise NotFoundError("Order", payload.order_id)
        if payload.product_id is not None and await self.products.get_product(payload.product_id) is None:
            raise NotFoundError("Product", payload.product_id)

        production = Production(
            order_id=payload.order_id,
            user_id=user.id,
            product_id=payload.product_id,
            product_name=payload.product_name,
            date=payload.date or dt.date.today(),
            stage=payload.stage,
            status=payload.status,
            quantity=payload.quantity,
            resources_used=payload.resources_used,
            notes=payload.notes,
        )
        created = await self.repo.create_production(production)
        logger.info("Production job %s created for %s (%s)", created.id, created.product_name, created.stage)
        return created

    # PUBLIC_INTERFACE
    async def update_production(self, production_id: int, payload: ProductionUpdate) -> Production:
        """Apply stage/status/quantity/notes changes; unset fields are left alone."""
        production = await self.repo.get_production(production_id)
        if production is None:
            raise NotFoundError("Production", production_id)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        updated = await self.repo.update_production(production, **changes)
        logger.info("Production job %s updated: %s", production_id, changes)
        return updated

    # PUBLIC_INTERFACE
    async def analytics(self, filters: ProductionFilters = NO_FILTERS) -> ProductionAnalytics:
        """Counts by stage and by status plus the total quantity, over jobs matching ``filters``."""
        total, total_quantity = await self.repo.totals(filters)
        by_stage = dict(await self.repo.count_by(Production.stage, filters))
        by_status = dict(await self.repo.count_by(Production.status, filters))
        return ProductionAnalytics(
            total=total,
            total_quantity=total_quantity,
            by_stage=by_stage,
            by_status=by_status,
        )
