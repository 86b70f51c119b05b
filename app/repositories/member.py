from typing import Optional

from sqlalchemy.orm import Session

from app.models.member import Member
from app.repositories.base import BaseRepository


class MemberRepository(BaseRepository[Member, None, None]):

    def get_by_user_id(self, db: Session, user_id: int) -> Optional[Member]:
        """Perfil de miembro asociado a un usuario, si existe."""
        return db.query(Member).filter(Member.user_id == user_id).first()


member_repository = MemberRepository(Member)
