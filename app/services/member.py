import logging

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models.member import Member
from app.models.user import User
from app.repositories.member import member_repository

logger = logging.getLogger(__name__)


class MemberService:
    """Directorio de miembros: resuelve el perfil de miembro de un usuario."""

    def get_member_for_user(self, db: Session, user: User) -> Member:
        member = member_repository.get_by_user_id(db, user_id=user.id)
        if not member:
            logger.info(f"Usuario {user.id} sin perfil de miembro")
            raise NotFoundError("Member profile not found")
        return member


member_service = MemberService()
