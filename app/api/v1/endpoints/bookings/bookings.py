from app.api.v1.endpoints.bookings.common import *

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[Union[schemas.Booking, schemas.WaitlistOutcome]],
    status_code=status.HTTP_201_CREATED,
    responses=security_responses,
)
async def create_booking(
    booking_in: schemas.BookingCreate,
    db: Session = Depends(get_db),
    db_user: User = Depends(get_current_db_user),
    redis_client: Optional[Redis] = Depends(get_redis_client)
) -> Any:
    """
    Book a Class Slot

    Books the requested slot for the current member. When the slot is at
    capacity the member is added to the waitlist instead and the response
    data has `type: "waitlist"` with the assigned position.

    Args:
        booking_in (BookingCreate): classId, bookingDate, startTime, endTime and optional notes.
        db (Session, optional): Database session dependency.
        db_user (User, optional): Authenticated local user.
        redis_client (Redis, optional): Redis client dependency.

    Returns:
        ApiResponse: The created booking, or the waitlist outcome.

    Raises:
        HTTPException 400: Missing details or duplicate booking for the slot.
        HTTPException 401: Invalid or missing token.
        HTTPException 404: Class or member profile not found.
    """
    result = await booking_service.create_booking(
        db, user=db_user, booking_in=booking_in, redis_client=redis_client
    )
    if isinstance(result, schemas.WaitlistOutcome):
        return ApiResponse(data=result, message="Class is full. You have been added to the waitlist.")
    return ApiResponse(data=result, message="Booking created successfully")


@router.get("/my-bookings", response_model=ApiResponse[schemas.MyBookings], responses=security_responses)
async def get_my_bookings(
    db: Session = Depends(get_db),
    db_user: User = Depends(get_current_db_user)
) -> Any:
    """
    List Current Member's Bookings

    Returns every booking of the current member sorted by date and start
    time, split into `upcoming` (slot starts after now) and `past`.

    Raises:
        HTTPException 401: Invalid or missing token.
        HTTPException 404: Member profile not found.
    """
    data = await booking_service.get_my_bookings(db, user=db_user)
    return ApiResponse(data=data)


@router.get("", response_model=ApiResponse[List[schemas.BookingWithMember]], responses=security_responses)
async def get_all_bookings(
    db: Session = Depends(get_db),
    trainer: User = Depends(require_trainer)
) -> Any:
    """
    List All Bookings (Trainer/Admin)

    Returns every booking, newest date first, with member and class details.

    Raises:
        HTTPException 401: Invalid or missing token.
        HTTPException 403: Caller is not a trainer or admin.
    """
    data = await booking_service.get_all_bookings(db)
    return ApiResponse(data=data)


@router.delete("/{booking_id}", response_model=ApiResponse[schemas.Booking], responses=security_responses)
async def cancel_booking(
    booking_id: int = Path(..., description="ID of the booking"),
    reason: Optional[str] = Query(None, description="Reason for cancellation"),
    db: Session = Depends(get_db),
    db_user: User = Depends(get_current_db_user),
    redis_client: Optional[Redis] = Depends(get_redis_client)
) -> Any:
    """
    Cancel a Booking

    Cancels one of the current member's bookings. Cancellation must happen
    at least two hours before the slot starts. The earliest waiting member
    for the same slot, if any, is booked into the freed place.

    Args:
        booking_id (int): The ID of the booking to cancel.
        reason (str, optional): Free-text cancellation reason.

    Returns:
        ApiResponse[Booking]: The cancelled booking.

    Raises:
        HTTPException 400: Less than two hours before the slot.
        HTTPException 403: Booking belongs to another member.
        HTTPException 404: Booking or member profile not found.
    """
    booking = await booking_service.cancel_booking(
        db, user=db_user, booking_id=booking_id, reason=reason, redis_client=redis_client
    )
    return ApiResponse(data=booking, message="Booking cancelled successfully")


@router.patch("/{booking_id}/status", response_model=ApiResponse[schemas.Booking], responses=security_responses)
async def update_booking_status(
    status_in: schemas.BookingStatusUpdate,
    booking_id: int = Path(..., description="ID of the booking"),
    db: Session = Depends(get_db),
    trainer: User = Depends(require_trainer),
    redis_client: Optional[Redis] = Depends(get_redis_client)
) -> Any:
    """
    Mark Attendance (Trainer/Admin)

    Moves a confirmed booking to `completed` (checking the member in) or
    `no-show`.

    Raises:
        HTTPException 400: Booking is not confirmed.
        HTTPException 403: Caller is not a trainer or admin.
        HTTPException 404: Booking not found.
    """
    booking = await booking_service.update_booking_status(
        db, booking_id=booking_id, status_in=status_in, redis_client=redis_client
    )
    return ApiResponse(data=booking, message="Booking status updated successfully")
