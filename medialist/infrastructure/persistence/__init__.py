"""
Module de persistance SQLite pour medialist.

- database.py : Engine SQLite, creation du schema
- models.py : Modeles SQLModel representant les tables shows et episodes

Les modeles ici sont des adapters de persistance, distincts des entites de
domaine (dataclass dans core/entities/). La conversion entre les deux se
fait dans les repositories.

Usage:
    from medialist.infrastructure.persistence import init_db

    init_db()  # Cree les tables si necessaire
"""

from medialist.infrastructure.persistence.database import (
    create_db_engine,
    create_schema,
    get_engine,
    init_db,
)
from medialist.infrastructure.persistence.models import EpisodeModel, ShowModel

__all__ = [
    "create_db_engine",
    "create_schema",
    "get_engine",
    "init_db",
    "ShowModel",
    "EpisodeModel",
]
