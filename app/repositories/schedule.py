from typing import Optional

from sqlalchemy.orm import Session

from app.models.schedule import Class
from app.repositories.base import BaseRepository


class ClassRepository(BaseRepository[Class, None, None]):
    """Catálogo de clases; el flujo de reservas solo lo lee."""

    def get_class(self, db: Session, class_id: int) -> Optional[Class]:
        return self.get(db, id=class_id)


class_repository = ClassRepository(Class)
