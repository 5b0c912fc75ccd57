"""
Interface port pour l'exploration du systeme de fichiers.

L'exploration se base uniquement sur les noms de fichiers : le contenu
des videos n'est jamais lu.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class IVideoFileProber(ABC):
    """
    Interface de decouverte des fichiers video d'une serie.

    Definit les operations pour lister les fichiers candidats, les compter
    et deviner le titre de la serie depuis leurs noms.
    """

    @abstractmethod
    def is_video_file(self, path: Path) -> bool:
        """Verifie si le chemin est un fichier video reconnu."""
        ...

    @abstractmethod
    def list_video_files(self, path: Path) -> list[Path]:
        """
        Liste les fichiers video d'un repertoire (non recursif).

        Si path est lui-meme un fichier video, retourne [path].

        Leve :
            FileProbeError : Si le chemin ne peut pas etre lu
        """
        ...

    @abstractmethod
    def guess_title(self, path: Path) -> str:
        """Devine le titre de la serie depuis le premier fichier trouve."""
        ...

    @abstractmethod
    def count_video_files(self, path: Path) -> int:
        """Nombre de fichiers video trouves sous path."""
        ...
