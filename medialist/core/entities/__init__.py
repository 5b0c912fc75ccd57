"""
Entites du domaine medialist.

- Show : serie suivie, avec sa progression et ses episodes
- Episode : episode numerote adosse a un fichier video local
- TitleSort : ordre d'affichage de la liste des series
"""

from medialist.core.entities.media import (
    Episode,
    Show,
    TitleSort,
    pack_extra_info,
    unpack_extra_info,
)

__all__ = [
    "Episode",
    "Show",
    "TitleSort",
    "pack_extra_info",
    "unpack_extra_info",
]
