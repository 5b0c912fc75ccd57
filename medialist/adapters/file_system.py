"""
Adaptateur pour l'exploration du systeme de fichiers.

Implementation concrete de IVideoFileProber. La detection se fait sur
l'extension et le nom des fichiers uniquement ; le contenu n'est jamais lu.
"""

from pathlib import Path

from medialist.core.errors import FileProbeError
from medialist.core.ports.file_system import IVideoFileProber

# Extensions video reconnues (comparaison par sous-chaine, insensible a la casse)
VIDEO_EXTENSIONS: tuple[str, ...] = (
    "webm", "mkv", "vob", "ogg", "gif", "avi", "mov", "wmv", "mp4", "m4v", "3gp",
)


def cleanup_title(name: str) -> str:
    """
    Retire tout ce qui est entre [...] ou (...) et les espaces autour.

    Les profondeurs de crochets et de parentheses sont suivies separement ;
    seuls les caracteres hors de tout groupe sont conserves. Un groupe
    non ferme masque la fin du nom.
    """
    result = []
    depth_square = 0
    depth_paren = 0
    for char in name:
        if char == "[":
            depth_square += 1
        elif char == "]":
            depth_square -= 1
        elif char == "(":
            depth_paren += 1
        elif char == ")":
            depth_paren -= 1
        elif depth_square == 0 and depth_paren == 0:
            result.append(char)
    return "".join(result).strip()


def remove_after_last_dash(title: str) -> str:
    """Coupe au dernier tiret ("Show Name - 01" -> "Show Name")."""
    index = title.rfind("-")
    if index == -1:
        return title
    return title[:index].strip()


class VideoFileProber(IVideoFileProber):
    """
    Implementation de IVideoFileProber pour le systeme de fichiers reel.

    Les repertoires ne sont pas parcourus recursivement : une serie
    correspond a un dossier de fichiers video.
    """

    def is_video_file(self, path: Path) -> bool:
        """Fichier existant dont l'extension contient une extension video."""
        if not path.is_file():
            return False
        extension = path.suffix.lstrip(".").lower()
        return any(video_ext in extension for video_ext in VIDEO_EXTENSIONS)

    def list_video_files(self, path: Path) -> list[Path]:
        """
        Liste les fichiers video sous path, tries par chemin.

        Leve :
            FileProbeError : Si le repertoire ne peut pas etre lu
        """
        if self.is_video_file(path):
            return [path]
        try:
            files = [child for child in path.iterdir() if self.is_video_file(child)]
        except OSError as e:
            raise FileProbeError(f"Lecture impossible de {path}: {e}") from e
        return sorted(files)

    def guess_title(self, path: Path) -> str:
        """
        Devine le titre de la serie depuis le premier fichier video.

        Exemple : "Show Name - 01 [Group].mkv" -> "Show Name".
        Si le nettoyage ne laisse rien, le nom du fichier sans extension
        est retourne. Chaine vide si aucun fichier n'est trouve.
        """
        files = self.list_video_files(path)
        if not files:
            return ""
        stem = files[0].stem
        guessed = remove_after_last_dash(cleanup_title(stem))
        return guessed or stem

    def count_video_files(self, path: Path) -> int:
        """Nombre de fichiers video sous path."""
        return len(self.list_video_files(path))
