"""
Interface port pour les services de suivi externes.

Un service de suivi detient la progression distante de l'utilisateur et
les metadonnees des episodes. Deux variantes existent, distinguees par
ServiceType : MyAnimeList et un service local sans reseau. Ajouter un
fournisseur revient a ajouter un adaptateur, sans toucher au stockage
ni au reconciliateur.

Toutes les operations reseau sont des coroutines : elles ne rendent la main
qu'une fois le resultat distant connu ou l'echec definitif (RemoteError).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ServiceType(Enum):
    """Variantes de service de suivi."""

    MAL = "mal"
    LOCAL = "local"


class EntryStatus(Enum):
    """Statut d'une serie dans la liste distante de l'utilisateur."""

    NONE = "none"
    WATCHING = "watching"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"
    DROPPED = "dropped"
    PLAN_TO_WATCH = "plan_to_watch"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["EntryStatus"]:
        """Convertit le statut distant, NONE pour une valeur inconnue."""
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return cls.NONE


@dataclass(frozen=True)
class ServiceTitle:
    """Resultat de recherche de titre sur le service."""

    service_id: int
    title: str


@dataclass
class ServiceEpisodeDetails:
    """
    Metadonnees d'un episode sur le service.

    Attributs :
        number : Numero d'episode (None si le service ne le fournit pas)
        title : Titre principal
        title_japanese : Titre japonais
        title_romanji : Titre romanise
        duration : Duree en secondes
        aired : Date de diffusion (ISO 8601)
        score : Note moyenne de l'episode
        filler : Episode hors intrigue principale
        recap : Episode recapitulatif
    """

    number: Optional[int] = None
    title: Optional[str] = None
    title_japanese: Optional[str] = None
    title_romanji: Optional[str] = None
    duration: Optional[int] = None
    aired: Optional[str] = None
    score: Optional[float] = None
    filler: Optional[bool] = None
    recap: Optional[bool] = None


@dataclass
class ServiceUserEntry:
    """Entree de la serie dans la liste distante de l'utilisateur."""

    status: Optional[EntryStatus] = None
    progress: Optional[int] = None
    score: Optional[int] = None
    is_rewatching: Optional[bool] = None
    rewatch_count: Optional[int] = None
    updated_at: Optional[str] = None
    start_date: Optional[str] = None
    finish_date: Optional[str] = None
    comments: Optional[str] = None


@dataclass
class AlternativeTitles:
    """Titres alternatifs d'une serie (synonymes et titres par langue)."""

    synonyms: tuple[str, ...] = ()
    languages: dict[str, str] = field(default_factory=dict)


class ITrackingService(ABC):
    """
    Capacites d'un service de suivi consommees par le reconciliateur
    et le moteur de synchronisation.
    """

    @property
    @abstractmethod
    def service_type(self) -> ServiceType:
        """Variante du service."""
        ...

    @abstractmethod
    def is_authenticated(self) -> bool:
        """Indique si l'utilisateur est connecte au service."""
        ...

    @abstractmethod
    def authorization_url(self) -> Optional[str]:
        """URL a ouvrir pour se connecter, None si deja connecte."""
        ...

    @abstractmethod
    async def login(self, callback: str) -> None:
        """
        Termine la connexion avec le code (ou l'URL de redirection) recu.

        Leve :
            AuthError : Si le service refuse le code
        """
        ...

    @abstractmethod
    async def search_titles(self, text: str) -> list[ServiceTitle]:
        """Recherche des series par titre."""
        ...

    @abstractmethod
    async def get_title(self, service_id: int) -> str:
        """Titre principal de la serie sur le service."""
        ...

    @abstractmethod
    async def alternative_titles(self, service_id: int) -> Optional[AlternativeTitles]:
        """Titres alternatifs de la serie, s'ils existent."""
        ...

    @abstractmethod
    async def episode_count(self, service_id: int) -> Optional[int]:
        """Nombre d'episodes annonce par le service (None si inconnu)."""
        ...

    @abstractmethod
    async def episode_metadata(self, service_id: int) -> list[ServiceEpisodeDetails]:
        """Metadonnees de tous les episodes de la serie."""
        ...

    @abstractmethod
    async def user_entry(self, service_id: int) -> Optional[ServiceUserEntry]:
        """Entree de la serie dans la liste de l'utilisateur (None si absente)."""
        ...

    @abstractmethod
    async def set_remote_progress(self, service_id: int, progress: int) -> int:
        """
        Avance la progression distante.

        Retourne :
            La progression effectivement acceptee par le service
        """
        ...

    @abstractmethod
    async def init_show(self, service_id: int) -> None:
        """Ajoute la serie a la liste distante si elle n'y est pas encore."""
        ...

    async def remote_progress(self, service_id: int) -> Optional[int]:
        """Derniere progression connue du service pour cette serie."""
        entry = await self.user_entry(service_id)
        return entry.progress if entry is not None else None

    async def close(self) -> None:
        """Libere les ressources reseau."""
