"""Sous-package CLI commands - re-exporte les commandes publiques."""

from medialist.adapters.cli.commands.library_commands import (
    add_episode,
    delete,
    import_show,
    list_shows,
    progress,
    search,
)
from medialist.adapters.cli.commands.sync_commands import (
    login,
    sync,
)

__all__ = [
    # bibliotheque
    "add_episode",
    "delete",
    "import_show",
    "list_shows",
    "progress",
    "search",
    # service de suivi
    "login",
    "sync",
]
