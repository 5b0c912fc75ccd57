"""
Implementation SQLModel du repository Episode.

Implemente l'interface IEpisodeRepository pour la persistance des episodes
dans la base de donnees SQLite via SQLModel.
"""

from pathlib import Path
from typing import Optional

from sqlalchemy import func, insert, literal
from sqlalchemy import select as sa_select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from medialist.core.entities.media import Episode
from medialist.core.errors import ConstraintViolation, StorageError
from medialist.core.ports.repositories import IEpisodeRepository
from medialist.infrastructure.persistence.models import EpisodeModel, ShowModel
from medialist.infrastructure.persistence.repositories.show_repository import (
    episode_to_entity,
)


class SQLModelEpisodeRepository(IEpisodeRepository):
    """
    Repository SQLModel pour les episodes de series.

    Les insertions remplacent l'episode existant de meme (show_id, number).
    """

    def __init__(self, session: Session) -> None:
        """
        Initialise le repository avec une session SQLModel.

        Args :
            session : Session SQLModel active pour les operations DB
        """
        self._session = session

    def _commit(self) -> None:
        try:
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            raise ConstraintViolation(str(e.orig)) from e
        except SQLAlchemyError as e:
            self._session.rollback()
            raise StorageError(str(e)) from e

    def upsert_episode(
        self,
        show_id: int,
        number: int,
        path: Path,
        title: str = "",
        extra_info: int = 0,
        score: Optional[float] = None,
        duration: Optional[int] = None,
        aired: Optional[str] = None,
    ) -> None:
        """
        Insere ou remplace l'episode (show_id, number).

        Leve :
            ConstraintViolation : Si show_id ne designe aucune serie
                ou si number est inferieur a 1
        """
        model = EpisodeModel(
            show_id=show_id,
            number=number,
            path=str(path),
            title=title,
            extra_info=extra_info,
            score=score,
            duration=duration,
            aired=aired,
        )
        try:
            self._session.merge(model)
        except SQLAlchemyError as e:
            self._session.rollback()
            raise StorageError(str(e)) from e
        self._commit()

    def insert_episode_by_service_id(
        self,
        service_id: int,
        number: int,
        path: Path,
        title: str = "",
    ) -> int:
        """
        Insere un episode en resolvant service_id dans la requete meme.

        Aucune ligne n'est ecrite si aucune serie n'a ce service_id :
        une serie peut n'exister que localement.
        """
        source = sa_select(
            ShowModel.id,
            literal(number),
            literal(str(path)),
            literal(title),
            literal(0),
        ).where(ShowModel.service_id == service_id)
        statement = (
            insert(EpisodeModel)
            .prefix_with("OR REPLACE")
            .from_select(["show_id", "number", "path", "title", "extra_info"], source)
        )
        try:
            result = self._session.exec(statement)
        except IntegrityError as e:
            self._session.rollback()
            raise ConstraintViolation(str(e.orig)) from e
        except SQLAlchemyError as e:
            self._session.rollback()
            raise StorageError(str(e)) from e
        self._commit()
        return result.rowcount

    def get_by_show(self, show_id: int) -> list[Episode]:
        """Episodes d'une serie, tries par numero."""
        statement = (
            select(EpisodeModel)
            .where(EpisodeModel.show_id == show_id)
            .order_by(EpisodeModel.number)
        )
        try:
            models = self._session.exec(statement).all()
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e
        return [episode_to_entity(model) for model in models]

    def last_episode_number(self, show_id: int) -> int:
        """Plus grand numero d'episode de la serie, 0 si aucun."""
        statement = select(func.max(EpisodeModel.number)).where(
            EpisodeModel.show_id == show_id
        )
        try:
            last = self._session.exec(statement).one()
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e
        return last or 0
