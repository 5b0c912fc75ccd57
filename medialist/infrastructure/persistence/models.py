"""
Modeles SQLModel pour la base de donnees medialist.

Ces modeles representent les tables de la base SQLite. Ils sont distincts
des entites de domaine (dataclass dans core/entities/) ; la conversion
entre les deux se fait dans les repositories.

Tables:
- shows: Series suivies (titre et service_id uniques)
- episodes: Episodes, identifies par (show_id, number)

Le champ extra_info des episodes est un champ de bits :
bit 0 = recap, bit 1 = filler.
"""

from typing import Optional

from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel


class ShowModel(SQLModel, table=True):
    """
    Modele representant une serie dans la base de donnees.

    service_id vaut NULL pour une serie non liee a un service de suivi,
    ce qui permet a plusieurs series locales de coexister malgre la
    contrainte d'unicite.
    """

    __tablename__ = "shows"
    __table_args__ = (
        CheckConstraint("progress >= 0", name="ck_shows_progress_positive"),
        {"sqlite_autoincrement": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(unique=True, index=True)
    service_id: Optional[int] = Field(default=None, unique=True)
    progress: int = Field(default=0)


class EpisodeModel(SQLModel, table=True):
    """
    Modele representant un episode de serie.

    Lie a une serie via show_id (foreign key). Les metadonnees (titre,
    note, duree, diffusion) sont copiees depuis le service de suivi a
    l'insertion et ne sont pas resynchronisees ensuite.
    """

    __tablename__ = "episodes"
    __table_args__ = (CheckConstraint("number >= 1", name="ck_episodes_number_positive"),)

    show_id: int = Field(foreign_key="shows.id", primary_key=True)
    number: int = Field(primary_key=True)
    path: str
    title: str = ""
    extra_info: int = 0
    score: Optional[float] = None
    duration: Optional[int] = None
    aired: Optional[str] = None
