from app.api.v1.endpoints.bookings.common import *

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[schemas.RecurringBookingResult],
    status_code=status.HTTP_201_CREATED,
    responses=security_responses,
)
async def create_recurring_booking(
    recurring_in: schemas.RecurringBookingCreate,
    db: Session = Depends(get_db),
    db_user: User = Depends(get_current_db_user),
    redis_client: Optional[Redis] = Depends(get_redis_client)
) -> Any:
    """
    Create a Recurring Booking

    Stores a weekly or monthly rule and books every matching date between
    startDate and endDate. Dates whose slot is already full are skipped;
    they are not waitlisted.

    Args:
        recurring_in (RecurringBookingCreate): classId, recurrenceType, recurrenceDay,
            startDate, endDate, startTime, endTime and optional notes.

    Returns:
        ApiResponse[RecurringBookingResult]: The rule, bookings created and total sessions.

    Raises:
        HTTPException 400: Missing details or endDate before startDate.
        HTTPException 404: Class or member profile not found.
    """
    result = await booking_service.create_recurring_booking(
        db, user=db_user, recurring_in=recurring_in, redis_client=redis_client
    )
    return ApiResponse(
        data=result,
        message=f"Recurring booking created with {result.bookings_created} individual bookings",
    )


@router.get("", response_model=ApiResponse[List[schemas.RecurringBooking]], responses=security_responses)
async def get_my_recurring_bookings(
    db: Session = Depends(get_db),
    db_user: User = Depends(get_current_db_user)
) -> Any:
    """
    List Current Member's Recurring Bookings

    Returns the member's recurring rules that are not cancelled, newest first.
    """
    rules = await booking_service.get_my_recurring_bookings(db, user=db_user)
    return ApiResponse(data=rules)
