from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .admin import Admin, AdminSession  # noqa: F401
from .entry import RaffleEntry  # noqa: F401
from .prize import Prize  # noqa: F401
from .winner import Winner  # noqa: F401

__all__ = [
    "Base",
    "Admin",
    "AdminSession",
    "RaffleEntry",
    "Prize",
    "Winner",
]
