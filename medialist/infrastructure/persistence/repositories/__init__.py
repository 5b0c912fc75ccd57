"""
Implementations SQLModel des repositories.

Ce module contient les implementations concretes des interfaces repository
definies dans medialist/core/ports/repositories.py, utilisant SQLModel pour
la persistance SQLite.

Chaque repository :
- Herite de l'interface ABC correspondante du domaine
- Recoit une session SQLModel via injection de dependances
- Convertit entre entites de domaine (dataclass) et modeles DB (SQLModel)
- Traduit les erreurs SQLAlchemy (ConstraintViolation, StorageError)
"""

from medialist.infrastructure.persistence.repositories.episode_repository import (
    SQLModelEpisodeRepository,
)
from medialist.infrastructure.persistence.repositories.show_repository import (
    SQLModelShowRepository,
)

__all__ = [
    "SQLModelShowRepository",
    "SQLModelEpisodeRepository",
]
