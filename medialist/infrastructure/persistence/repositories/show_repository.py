"""
Implementation SQLModel du repository Show.

Implemente l'interface IShowRepository pour la persistance des series
dans la base de donnees SQLite via SQLModel.
"""

from pathlib import Path
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from medialist.core.entities.media import Episode, Show, TitleSort, unpack_extra_info
from medialist.core.errors import ConstraintViolation, NotFound, StorageError
from medialist.core.ports.repositories import IShowRepository
from medialist.infrastructure.persistence.models import EpisodeModel, ShowModel


def episode_to_entity(model: EpisodeModel) -> Episode:
    """
    Convertit un modele episode en entite domaine.

    Le drapeau file_deleted est calcule a la lecture.
    """
    recap, filler = unpack_extra_info(model.extra_info or 0)
    path = Path(model.path)
    return Episode(
        number=model.number,
        path=path,
        title=model.title or "",
        score=model.score,
        duration=model.duration,
        aired=model.aired,
        recap=recap,
        filler=filler,
        file_deleted=not path.exists(),
    )


def _sort_key(sort: TitleSort):
    if sort in (TitleSort.TITLE_ASC, TitleSort.TITLE_DESC):
        return lambda show: show.title
    if sort in (TitleSort.SERVICE_ID_ASC, TitleSort.SERVICE_ID_DESC):
        return lambda show: show.service_id
    return lambda show: show.local_id


class SQLModelShowRepository(IShowRepository):
    """
    Repository SQLModel pour les series.

    Implemente IShowRepository avec conversion entre l'entite Show (domaine)
    et ShowModel (persistance). Les erreurs SQLAlchemy sont traduites dans
    la taxonomie du domaine.
    """

    def __init__(self, session: Session) -> None:
        """
        Initialise le repository avec une session SQLModel.

        Args :
            session : Session SQLModel active pour les operations DB
        """
        self._session = session

    def _to_entity(self, model: ShowModel, episodes: Iterable[EpisodeModel] = ()) -> Show:
        return Show(
            local_id=model.id,
            title=model.title,
            service_id=model.service_id or 0,
            progress=model.progress,
            episodes=sorted(
                (episode_to_entity(episode) for episode in episodes),
                key=lambda episode: episode.number,
            ),
        )

    def _commit(self) -> None:
        """Valide la transaction, annulee en cas d'echec."""
        try:
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            raise ConstraintViolation(str(e.orig)) from e
        except SQLAlchemyError as e:
            self._session.rollback()
            raise StorageError(str(e)) from e

    def list_shows(self, sort: TitleSort = TitleSort.LOCAL_ID_ASC) -> list[Show]:
        """
        Liste les series avec leurs episodes.

        Les lignes de la jointure sont regroupees par serie le temps de la
        construction ; seule la liste ordonnee est exposee.
        """
        statement = (
            select(ShowModel, EpisodeModel)
            .join(EpisodeModel, EpisodeModel.show_id == ShowModel.id, isouter=True)
            .order_by(ShowModel.id, EpisodeModel.number)
        )
        try:
            rows = self._session.exec(statement).all()
        except SQLAlchemyError as e:
            raise StorageError(f"Lecture de la liste impossible: {e}") from e

        grouped: dict[int, tuple[ShowModel, list[EpisodeModel]]] = {}
        for show_model, episode_model in rows:
            _, episodes = grouped.setdefault(show_model.id, (show_model, []))
            if episode_model is not None:
                episodes.append(episode_model)

        shows = [self._to_entity(model, episodes) for model, episodes in grouped.values()]
        shows.sort(key=_sort_key(sort), reverse=sort.descending)
        return shows

    def get_show(self, local_id: int) -> Show:
        """Recupere une serie et ses episodes par ID local."""
        try:
            model = self._session.get(ShowModel, local_id)
            if model is None:
                raise NotFound(f"Serie introuvable: {local_id}")
            episodes = self._session.exec(
                select(EpisodeModel).where(EpisodeModel.show_id == local_id)
            ).all()
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e
        return self._to_entity(model, episodes)

    def create_show(self, title: str, service_id: int = 0, progress: int = 0) -> int:
        """Cree une serie ; service_id 0 est stocke comme NULL (non liee)."""
        if progress < 0:
            raise ValueError(f"Progression negative: {progress}")
        model = ShowModel(title=title, service_id=service_id or None, progress=progress)
        self._session.add(model)
        self._commit()
        self._session.refresh(model)
        return model.id

    def find_show_id_by_title(self, title: str) -> int:
        """Retourne l'ID local de la serie portant exactement ce titre."""
        try:
            local_id: Optional[int] = self._session.exec(
                select(ShowModel.id).where(ShowModel.title == title)
            ).first()
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e
        if local_id is None:
            raise NotFound(f"Aucune serie intitulee '{title}'")
        return local_id

    def set_progress(self, local_id: int, progress: int) -> None:
        """Remplace la progression locale sans condition."""
        if progress < 0:
            raise ValueError(f"Progression negative: {progress}")
        model = self._session.get(ShowModel, local_id)
        if model is None:
            raise NotFound(f"Serie introuvable: {local_id}")
        model.progress = progress
        self._session.add(model)
        self._commit()

    def delete_show(self, local_id: int) -> None:
        """Supprime les episodes puis la serie."""
        try:
            episodes = self._session.exec(
                select(EpisodeModel).where(EpisodeModel.show_id == local_id)
            ).all()
            for episode in episodes:
                self._session.delete(episode)
            self._session.flush()
            model = self._session.get(ShowModel, local_id)
            if model is not None:
                self._session.delete(model)
        except SQLAlchemyError as e:
            self._session.rollback()
            raise StorageError(str(e)) from e
        self._commit()
