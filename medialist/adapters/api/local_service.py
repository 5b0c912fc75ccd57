"""
Service de suivi local, sans reseau.

Utilise quand aucun compte distant n'est configure : la progression reste
purement locale et aucune metadonnee n'est disponible.
"""

from typing import Optional

from medialist.core.ports.tracking_service import (
    AlternativeTitles,
    ITrackingService,
    ServiceEpisodeDetails,
    ServiceTitle,
    ServiceType,
    ServiceUserEntry,
)


class LocalService(ITrackingService):
    """Service toujours connecte, sans donnees distantes."""

    @property
    def service_type(self) -> ServiceType:
        return ServiceType.LOCAL

    def is_authenticated(self) -> bool:
        return True

    def authorization_url(self) -> Optional[str]:
        return None

    async def login(self, callback: str) -> None:
        return None

    async def search_titles(self, text: str) -> list[ServiceTitle]:
        return []

    async def get_title(self, service_id: int) -> str:
        return ""

    async def alternative_titles(self, service_id: int) -> Optional[AlternativeTitles]:
        return None

    async def episode_count(self, service_id: int) -> Optional[int]:
        return None

    async def episode_metadata(self, service_id: int) -> list[ServiceEpisodeDetails]:
        return []

    async def user_entry(self, service_id: int) -> Optional[ServiceUserEntry]:
        return None

    async def set_remote_progress(self, service_id: int, progress: int) -> int:
        """Accepte toujours la progression demandee."""
        return progress

    async def init_show(self, service_id: int) -> None:
        return None
