from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from furniture_api.core.deps import get_current_active_user, get_session
from furniture_api.db.models.users import User
from furniture_api.repositories.cart import CartRepository
from furniture_api.repositories.catalog import ProductRepository
from furniture_api.schemas.common import MessageResponse
from furniture_api.schemas.sales import CartItemAdd, CartItemRead, CartItemUpdate

router = APIRouter(prefix="/cart", tags=["Cart"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[CartItemRead],
    summary="List cart",
    description="Return the caller's cart lines with product details.",
)
async def list_cart(
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_session),
) -> List[CartItemRead]:
    repo = CartRepository(session)
    lines = await repo.list_for_user(user.id)
    return [CartItemRead.model_validate(x) for x in lines]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=CartItemRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add to cart",
    description="Add a product to the cart; an existing line for the same product is incremented.",
)
async def add_to_cart(
    payload: CartItemAdd,
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_session),
) -> CartItemRead:
    product = await ProductRepository(session).get_product(payload.product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    line = await CartRepository(session).add_product(user.id, product.id, payload.quantity)
    return CartItemRead.model_validate(line)


# PUBLIC_INTERFACE
@router.put(
    "/{line_id}",
    response_model=CartItemRead,
    summary="Update cart line",
    description="Set the quantity of one of the caller's cart lines.",
)
async def update_cart_line(
    payload: CartItemUpdate,
    line_id: int = Path(...),
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_session),
) -> CartItemRead:
    repo = CartRepository(session)
    line = await repo.get_line(user.id, line_id)
    if not line:
        raise HTTPException(status_code=404, detail="Cart item not found")
    updated = await repo.set_quantity(line, payload.quantity)
    return CartItemRead.model_validate(updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{line_id}",
    response_model=MessageResponse,
    summary="Remove cart line",
    description="Remove one of the caller's cart lines.",
)
async def remove_cart_line(
    line_id: int = Path(...),
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    repo = CartRepository(session)
    line = await repo.get_line(user.id, line_id)
    if not line:
        raise HTTPException(status_code=404, detail="Cart item not found")
    await repo.remove_line(line)
    return MessageResponse(message="Removed from cart")
