# Importar todos los modelos para que create_all los registre en Base.metadata
from app.db.base_class import Base  # noqa
from app.models.user import User  # noqa
from app.models.member import Member  # noqa
from app.models.schedule import Class  # noqa
from app.models.booking import Booking, WaitlistEntry, RecurringBooking  # noqa
