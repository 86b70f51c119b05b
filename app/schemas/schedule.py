from typing import Optional

from app.schemas.response import CamelModel


class ClassSummary(CamelModel):
    """Datos de la clase que se muestran junto a una reserva"""
    id: int
    name: str
    capacity: int
    duration: int
    location: str
    trainer_id: Optional[int] = None
    trainer_name: Optional[str] = None
