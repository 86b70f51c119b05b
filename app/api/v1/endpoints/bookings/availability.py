from app.api.v1.endpoints.bookings.common import *

router = APIRouter()


@router.get("/{class_id}/{date}", response_model=ApiResponse[schemas.Availability])
async def get_class_availability(
    class_id: int = Path(..., description="ID of the class"),
    date: date = Path(..., description="Date to check (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    redis_client: Optional[Redis] = Depends(get_redis_client)
) -> Any:
    """
    Get Class Availability for a Date

    Public endpoint. Returns capacity, booked count, remaining spots and
    waitlist size for a class on the given date. Counts cover every start
    time of that date.

    Args:
        class_id (int): The ID of the class.
        date (date): Calendar date in ISO format.
        db (Session, optional): Database session dependency.
        redis_client (Redis, optional): Redis client dependency; None disables caching.

    Returns:
        ApiResponse[Availability]: Availability summary for the class and date.

    Raises:
        HTTPException 404: Class not found.
    """
    availability = await booking_service.get_availability(
        db, class_id=class_id, on_date=date, redis_client=redis_client
    )
    return ApiResponse(data=availability)
