"""
Common imports and dependencies for the bookings module.

This module centralizes shared imports used across all booking-related
endpoints: authentication dependencies, database and Redis access, the
booking service and its schemas.
"""

from typing import Any, List, Optional, Union
from datetime import date
from fastapi import APIRouter, Depends, Path, Query, status
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.core.auth import get_current_db_user, require_trainer, security_responses
from app.db.redis_client import get_redis_client
from app.db.session import get_db
from app.models.user import User
from app.schemas import booking as schemas
from app.schemas.response import ApiResponse
from app.services.booking import booking_service
