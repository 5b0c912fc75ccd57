"""
Interfaces ports pour le stockage de la bibliotheque.

Interfaces abstraites definissant les contrats de persistance des series
et des episodes. L'implementation concrete utilise SQLite via SQLModel.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from medialist.core.entities.media import Episode, Show, TitleSort


class IShowRepository(ABC):
    """
    Interface de stockage des series.

    Garantit l'unicite du titre et du service_id, et la suppression
    en cascade des episodes.
    """

    @abstractmethod
    def list_shows(self, sort: TitleSort = TitleSort.LOCAL_ID_ASC) -> list[Show]:
        """
        Liste toutes les series avec leurs episodes.

        Args :
            sort : Ordre des series (les episodes sont toujours tries par numero)

        Retourne :
            Liste ordonnee des series

        Leve :
            StorageError : En cas d'echec de lecture
        """
        ...

    @abstractmethod
    def get_show(self, local_id: int) -> Show:
        """Recupere une serie par son ID local. Leve NotFound si absente."""
        ...

    @abstractmethod
    def create_show(self, title: str, service_id: int = 0, progress: int = 0) -> int:
        """
        Cree une serie et retourne son ID local.

        Leve :
            ConstraintViolation : Si le titre ou le service_id existe deja
        """
        ...

    @abstractmethod
    def find_show_id_by_title(self, title: str) -> int:
        """Retourne l'ID local de la serie portant ce titre. Leve NotFound sinon."""
        ...

    @abstractmethod
    def set_progress(self, local_id: int, progress: int) -> None:
        """Remplace la progression locale. Leve NotFound si la serie n'existe pas."""
        ...

    @abstractmethod
    def delete_show(self, local_id: int) -> None:
        """Supprime la serie et ses episodes. Sans effet si l'ID est inconnu."""
        ...


class IEpisodeRepository(ABC):
    """
    Interface de stockage des episodes.

    Un episode est identifie par (show_id, number) ; une nouvelle insertion
    avec la meme identite remplace l'episode existant.
    """

    @abstractmethod
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
        """Insere ou remplace l'episode (show_id, number)."""
        ...

    @abstractmethod
    def insert_episode_by_service_id(
        self,
        service_id: int,
        number: int,
        path: Path,
        title: str = "",
    ) -> int:
        """
        Insere un episode pour la serie liee a ce service_id.

        Retourne :
            Nombre de lignes ecrites (0 si aucune serie n'a ce service_id)
        """
        ...

    @abstractmethod
    def get_by_show(self, show_id: int) -> list[Episode]:
        """Episodes d'une serie, tries par numero croissant."""
        ...

    @abstractmethod
    def last_episode_number(self, show_id: int) -> int:
        """Plus grand numero d'episode stocke pour la serie (0 si aucun)."""
        ...
