from typing import Dict, List, Optional
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.db.session import get_db
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class AuthUser(BaseModel):
    """Identidad extraída de las claims del token."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias='sub')
    email: Optional[str] = None
    permissions: Optional[List[str]] = None


class HTTPAuthError(BaseModel):
    detail: str


unauthenticated_response: Dict = {401: {'model': HTTPAuthError}}
unauthorized_response: Dict = {403: {'model': HTTPAuthError}}
security_responses: Dict = {**unauthenticated_response, **unauthorized_response}


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> AuthUser:
    """Verifica la firma del token y devuelve el usuario autenticado."""
    settings = get_settings()
    options = {"verify_aud": settings.JWT_AUDIENCE is not None}
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options=options,
        )
    except JWTError as e:
        logger.info(f"Token rechazado: {e}")
        raise _unauthenticated("Invalid authentication token")

    try:
        return AuthUser.model_validate(payload)
    except ValidationError:
        raise _unauthenticated("Token is missing the subject claim")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthUser:
    if credentials is None or not credentials.credentials:
        raise _unauthenticated("Not authenticated")
    return decode_token(credentials.credentials)


async def get_current_db_user(
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
) -> User:
    """Resuelve el usuario local a partir del `sub` del token."""
    db_user = db.query(User).filter(User.auth_id == current_user.id).first()
    if not db_user:
        logger.warning(f"Token válido pero sin usuario local para auth_id={current_user.id}")
        raise _unauthenticated("User not found")
    return db_user


async def require_trainer(db_user: User = Depends(get_current_db_user)) -> User:
    """Permite el acceso solo a entrenadores y administradores."""
    if db_user.role not in (UserRole.TRAINER, UserRole.ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Trainer or admin role required",
        )
    return db_user
