"""Members router - CRUD operations for member profiles."""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.models import AuthUser
from libs.common.datetime_utils import Clock, get_clock
from libs.db.session import get_async_db
from services.members_service.dependencies import get_current_user
from services.members_service.schemas import (
    MemberCollectionResponse,
    MemberEnvelope,
    MemberListResponse,
    MemberMessageEnvelope,
    PaginationMeta,
)
from services.members_service.services import member_service
from services.members_service.services.views import member_response

router = APIRouter(prefix="/members", tags=["members"])


@router.get("", response_model=MemberListResponse)
async def list_members(
    page: Optional[int] = Query(None, ge=1),
    per_page: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    clock: Clock = Depends(get_clock),
):
    """
    Paginated member directory.

    ``status=active`` restricts to active memberships; ``search`` matches
    names, email and membership type; ``per_page`` is clamped to 5..100.
    """
    result = await member_service.list_members(
        db,
        actor=current_user,
        status=status_filter,
        search=search,
        page=page,
        per_page=per_page,
    )
    today = clock.today()
    return MemberListResponse(
        data=[member_response(profile, today) for profile in result.items],
        meta=PaginationMeta(
            total=result.total,
            per_page=result.page.per_page,
            current_page=result.page.page,
            last_page=result.last_page,
            from_=result.first_item,
            to=result.last_item,
        ),
    )


@router.get("/expiring", response_model=MemberCollectionResponse)
async def list_expiring_members(
    days: Optional[int] = Query(None, ge=0, le=365),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    clock: Clock = Depends(get_clock),
):
    """Active memberships ending within the next ``days`` days."""
    profiles = await member_service.list_expiring_memberships(
        db, actor=current_user, within_days=days, clock=clock
    )
    today = clock.today()
    return MemberCollectionResponse(
        data=[member_response(profile, today) for profile in profiles]
    )


@router.post(
    "", response_model=MemberMessageEnvelope, status_code=status.HTTP_201_CREATED
)
async def create_member(
    payload: dict[str, Any] = Body(...),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    clock: Clock = Depends(get_clock),
):
    profile = await member_service.create_profile(
        db, actor=current_user, data=payload, clock=clock
    )
    return MemberMessageEnvelope(
        message="Member profile created successfully.",
        data=member_response(profile, clock.today()),
    )


@router.get("/{member_id}", response_model=MemberEnvelope)
async def get_member(
    member_id: int,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    clock: Clock = Depends(get_clock),
):
    profile = await member_service.get_member(db, member_id, actor=current_user)
    return MemberEnvelope(data=member_response(profile, clock.today()))


@router.api_route(
    "/{member_id}", methods=["PUT", "PATCH"], response_model=MemberMessageEnvelope
)
async def update_member(
    member_id: int,
    payload: dict[str, Any] = Body(...),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    clock: Clock = Depends(get_clock),
):
    """Partial update; only the supplied fields change."""
    profile = await member_service.update_profile(
        db, member_id, actor=current_user, data=payload, clock=clock
    )
    return MemberMessageEnvelope(
        message="Member profile updated successfully.",
        data=member_response(profile, clock.today()),
    )


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_member(
    member_id: int,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Soft delete. The profile can be restored afterwards."""
    await member_service.delete_profile(db, member_id, actor=current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{member_id}/restore", response_model=MemberMessageEnvelope)
async def restore_member(
    member_id: int,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    clock: Clock = Depends(get_clock),
):
    profile = await member_service.restore_profile(db, member_id, actor=current_user)
    return MemberMessageEnvelope(
        message="Member profile restored successfully.",
        data=member_response(profile, clock.today()),
    )
