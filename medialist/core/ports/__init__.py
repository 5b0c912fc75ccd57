"""
Ports (interfaces abstraites) definissant les contrats pour les adaptateurs.

Ports repository : Contrats de persistance
- IShowRepository : Stockage des series
- IEpisodeRepository : Stockage des episodes

Port systeme de fichiers :
- IVideoFileProber : Decouverte des fichiers video et devinette du titre

Port service de suivi :
- ITrackingService : Progression distante et metadonnees d'episodes
"""

from medialist.core.ports.file_system import IVideoFileProber
from medialist.core.ports.repositories import IEpisodeRepository, IShowRepository
from medialist.core.ports.tracking_service import (
    AlternativeTitles,
    EntryStatus,
    ITrackingService,
    ServiceEpisodeDetails,
    ServiceTitle,
    ServiceType,
    ServiceUserEntry,
)

__all__ = [
    # Repositories
    "IShowRepository",
    "IEpisodeRepository",
    # Systeme de fichiers
    "IVideoFileProber",
    # Service de suivi
    "ITrackingService",
    "ServiceType",
    "EntryStatus",
    "ServiceTitle",
    "ServiceEpisodeDetails",
    "ServiceUserEntry",
    "AlternativeTitles",
]
