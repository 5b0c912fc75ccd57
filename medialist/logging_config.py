"""
Configuration du logging de medialist via loguru.

Deux sorties :
- stderr : niveau configurable, format court adapte a la ligne de commande,
  avec les champs de contexte (logger.info("...", title=...)) en fin de ligne
- fichier : tous les niveaux, JSON, rotation et retention configurables

Les messages des bibliotheques tierces qui passent par loguru ne sont
affiches sur stderr qu'a partir de WARNING.
"""

import sys

from loguru import logger

from medialist.config import Settings
from medialist.core.errors import StorageError


def _escape(text: str) -> str:
    """Protege une valeur inseree dans un gabarit loguru (accolades et balises)."""
    return text.replace("{", "{{").replace("}", "}}").replace("<", r"\<")


def _console_format(record) -> str:
    context = ", ".join(f"{key}={value}" for key, value in record["extra"].items())
    line = "<level>{level: <8}</level> | {message}"
    if context:
        line += f" <dim>({_escape(context)})</dim>"
    return line + "\n{exception}"


def _console_filter(level: str):
    threshold = logger.level(level.upper()).no
    foreign_threshold = max(threshold, logger.level("WARNING").no)

    def accept(record) -> bool:
        own = (record["name"] or "").startswith("medialist")
        return record["level"].no >= (threshold if own else foreign_threshold)

    return accept


def configure_logging(settings: Settings) -> None:
    """
    Remplace les handlers loguru par ceux de medialist.

    Args :
        settings : Parametres (log_level, log_file, log_rotation_size,
            log_retention_count)

    Leve :
        StorageError : Si le repertoire du fichier de log ne peut etre cree
    """
    logger.remove()

    logger.add(
        sys.stderr,
        level=0,
        format=_console_format,
        filter=_console_filter(settings.log_level),
        colorize=True,
    )

    log_file = settings.log_file
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageError(f"Repertoire des logs inaccessible: {e}") from e
    logger.add(
        log_file,
        level="DEBUG",
        serialize=True,
        rotation=settings.log_rotation_size,
        retention=settings.log_retention_count,
        compression="zip",
        enqueue=True,
    )

    logger.debug("Logging configure", log_file=str(log_file), level=settings.log_level)
