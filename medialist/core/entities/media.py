"""
Entites de la bibliotheque.

Une serie (Show) possede une identite locale et, optionnellement, une
identite sur le service de suivi distant (service_id). Ses episodes sont
toujours ordonnes par numero croissant.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

# Bits du champ extra_info des episodes
RECAP_FLAG = 1 << 0
FILLER_FLAG = 1 << 1


class TitleSort(Enum):
    """Ordre de tri de la liste des series."""

    LOCAL_ID_ASC = "local_id_asc"
    LOCAL_ID_DESC = "local_id_desc"
    TITLE_ASC = "title_asc"
    TITLE_DESC = "title_desc"
    SERVICE_ID_ASC = "service_id_asc"
    SERVICE_ID_DESC = "service_id_desc"

    @property
    def descending(self) -> bool:
        """Indique si le tri est decroissant."""
        return self.value.endswith("_desc")


@dataclass
class Episode:
    """
    Episode d'une serie.

    Attributs :
        number : Numero d'episode vu par l'utilisateur (>= 1)
        path : Chemin du fichier video (peut ne plus exister)
        title : Titre recupere depuis le service de suivi
        score : Note de l'episode sur le service de suivi
        duration : Duree en secondes
        aired : Date de diffusion (ISO 8601)
        recap : Episode recapitulatif
        filler : Episode hors intrigue principale
        file_deleted : Calcule a la lecture, le fichier n'existe plus
    """

    number: int
    path: Path
    title: str = ""
    score: Optional[float] = None
    duration: Optional[int] = None
    aired: Optional[str] = None
    recap: bool = False
    filler: bool = False
    file_deleted: bool = False

    @property
    def extra_info(self) -> int:
        """Champ de bits recap/filler tel qu'il est stocke."""
        return pack_extra_info(self.recap, self.filler)


@dataclass
class Show:
    """
    Serie suivie localement.

    Attributs :
        local_id : Identifiant local attribue par le stockage
        title : Titre unique dans la bibliotheque
        service_id : Identifiant sur le service de suivi (0 = non lie)
        progress : Dernier episode vu localement
        episodes : Episodes tries par numero croissant
    """

    local_id: int
    title: str
    service_id: int = 0
    progress: int = 0
    episodes: list[Episode] = field(default_factory=list)

    @property
    def is_linked(self) -> bool:
        """Indique si la serie est liee a un service de suivi."""
        return self.service_id != 0

    @property
    def last_episode_number(self) -> int:
        """Plus grand numero d'episode connu localement (0 si aucun)."""
        return max((episode.number for episode in self.episodes), default=0)


def pack_extra_info(recap: bool, filler: bool) -> int:
    """Combine les drapeaux recap et filler en un champ de bits."""
    extra_info = 0
    if recap:
        extra_info |= RECAP_FLAG
    if filler:
        extra_info |= FILLER_FLAG
    return extra_info


def unpack_extra_info(extra_info: int) -> tuple[bool, bool]:
    """Retourne (recap, filler) depuis le champ de bits stocke."""
    return bool(extra_info & RECAP_FLAG), bool(extra_info & FILLER_FLAG)
