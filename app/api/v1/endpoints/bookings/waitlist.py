from app.api.v1.endpoints.bookings.common import *

router = APIRouter()


@router.get("", response_model=ApiResponse[List[schemas.WaitlistEntry]], responses=security_responses)
async def get_my_waitlist(
    db: Session = Depends(get_db),
    db_user: User = Depends(get_current_db_user)
) -> Any:
    """
    List Current Member's Waitlist Entries

    Returns the member's entries that are still waiting or offered, newest first.
    """
    entries = await booking_service.get_my_waitlist(db, user=db_user)
    return ApiResponse(data=entries)


@router.delete("/{entry_id}", response_model=ApiResponse[schemas.WaitlistEntry], responses=security_responses)
async def remove_from_waitlist(
    entry_id: int = Path(..., description="ID of the waitlist entry"),
    db: Session = Depends(get_db),
    db_user: User = Depends(get_current_db_user),
    redis_client: Optional[Redis] = Depends(get_redis_client)
) -> Any:
    """
    Leave the Waitlist

    Marks one of the member's waitlist entries as expired. Positions of the
    remaining entries are left unchanged.

    Raises:
        HTTPException 403: Entry belongs to another member.
        HTTPException 404: Entry or member profile not found.
    """
    entry = await booking_service.remove_from_waitlist(
        db, user=db_user, entry_id=entry_id, redis_client=redis_client
    )
    return ApiResponse(data=entry, message="Removed from waitlist successfully")
