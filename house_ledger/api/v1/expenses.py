"""Expense endpoints"""
import json
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from house_ledger.api.deps import (get_current_user_id, get_house_member_id,
                                   require_house_member)
from house_ledger.config import get_settings
from house_ledger.core.exceptions import ValidationError
from house_ledger.database import get_db
from house_ledger.models.expense import ExpenseCategory
from house_ledger.repositories.house_member_repository import \
    HouseMemberRepository
from house_ledger.schemas.common import PaginationMeta
from house_ledger.schemas.expense import (ExpenseCreate, ExpenseListResponse,
                                          ExpenseResponse, ExpenseUpdate)
from house_ledger.services.cache_service import CacheService
from house_ledger.services.expense_service import ExpenseService

settings = get_settings()

router = APIRouter(tags=["Expenses"])


@router.post(
    "/houses/{house_id}/expenses",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_expense(
    house_id: UUID,
    expense_data: ExpenseCreate,
    current_user_id: UUID = Depends(get_house_member_id),
    db: AsyncSession = Depends(get_db),
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
):
    """
    Create a new expense in a house.

    The payer defaults to the current user. Splits must add up to the
    amount; the payer's own share may be listed and is kept implicit.

    Supports idempotency via the `Idempotency-Key` header: a repeated key
    returns the original response instead of creating a duplicate.

    Raises:
        400: If splits don't add up or an amount is invalid
        403: If the user (or the named payer) is not a house member
    """
    cache_key = None
    if idempotency_key:
        cache_key = f"idempotency:expense:{house_id}:{idempotency_key}:{current_user_id}"
        cached_response = await CacheService.get(cache_key)

        if cached_response:
            return ExpenseResponse(**json.loads(cached_response))

    payer_id = expense_data.paid_by or current_user_id
    if payer_id != current_user_id:
        if not await HouseMemberRepository.is_member(db, house_id, payer_id):
            raise ValidationError("Payer must be a member of the house")

    expense = await ExpenseService.create_expense(
        db, house_id, payer_id, current_user_id, expense_data
    )
    response = ExpenseResponse.model_validate(expense)

    if cache_key:
        await CacheService.set(
            cache_key,
            json.dumps(response.model_dump(mode="json")),
            ttl=settings.idempotency_ttl_seconds,
        )

    return response


@router.get("/houses/{house_id}/expenses", response_model=ExpenseListResponse)
async def list_expenses(
    house_id: UUID,
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(50, ge=1, le=100, description="Items per page"),
    category: Optional[ExpenseCategory] = Query(None, description="Filter by category"),
    start_date: Optional[date] = Query(None, description="Filter by start date"),
    end_date: Optional[date] = Query(None, description="Filter by end date"),
    current_user_id: UUID = Depends(get_house_member_id),
    db: AsyncSession = Depends(get_db),
):
    """
    List a house's expenses, most recent first.
    """
    expenses, total_count = await ExpenseService.list_expenses(
        db,
        house_id,
        page=page,
        page_size=page_size,
        category=category,
        start_date=start_date,
        end_date=end_date,
    )

    total_pages = (total_count + page_size - 1) // page_size if total_count > 0 else 0

    return ExpenseListResponse(
        items=[ExpenseResponse.model_validate(expense) for expense in expenses],
        pagination=PaginationMeta(
            page=page,
            page_size=page_size,
            total_items=total_count,
            total_pages=total_pages,
        ),
    )


@router.get("/expenses/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    expense_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Get one expense with its splits.

    Raises:
        404: If expense not found
        403: If the user is not a member of the expense's house
    """
    expense = await ExpenseService.get_expense(db, expense_id)
    await require_house_member(db, expense.house_id, current_user_id)
    return ExpenseResponse.model_validate(expense)


@router.put("/expenses/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: UUID,
    expense_data: ExpenseUpdate,
    current_user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Replace an expense's fields and, if given, its splits.

    Supplying splits resets their settlement state.

    Raises:
        400: If validation fails
        403: If the user is neither creator nor payer
        404: If expense not found
    """
    expense = await ExpenseService.get_expense(db, expense_id)
    ExpenseService.ensure_can_modify(expense, current_user_id)

    updated = await ExpenseService.update_expense(db, expense_id, expense_data)
    return ExpenseResponse.model_validate(updated)


@router.delete("/expenses/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Delete an expense and its splits.

    Raises:
        403: If the user is neither creator nor payer
        404: If expense not found
    """
    expense = await ExpenseService.get_expense(db, expense_id)
    ExpenseService.ensure_can_modify(expense, current_user_id)

    await ExpenseService.delete_expense(db, expense_id)
    return None
