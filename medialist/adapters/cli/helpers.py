"""
Utilitaires partages pour les commandes CLI de medialist.

Ce module fournit :
- suppress_loguru : context manager pour desactiver/reactiver les logs loguru
- with_container : decorateur injectant un container initialise
- run_command : execute une commande async et affiche les erreurs
- console : instance Rich Console partagee (reexportee depuis display)
"""

import asyncio
from contextlib import contextmanager
from functools import wraps
from typing import Any, Coroutine

import typer
from loguru import logger as loguru_logger
from rich.markup import escape

from medialist.adapters.cli.display import console
from medialist.container import Container
from medialist.core.errors import LibraryError


@contextmanager
def suppress_loguru():
    """
    Context manager pour desactiver les logs loguru pendant l'affichage Rich.

    Usage :
        with suppress_loguru():
            console.print(...)
    """
    loguru_logger.disable("medialist")
    try:
        yield
    finally:
        loguru_logger.enable("medialist")


def with_container(requires_db: bool = True):
    """
    Decorateur qui injecte un container initialise en premier argument.

    Le service de suivi est ferme a la fin de la commande.

    Args :
        requires_db : Si True (defaut), initialise la base de donnees.

    Usage :
        @with_container()
        async def my_command(container, ...):
            library = container.library_service()
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            container = Container()
            container.config()
            if requires_db:
                container.database.init()
            try:
                return await func(container, *args, **kwargs)
            finally:
                await container.tracking_service().close()
        return wrapper
    return decorator


def run_command(coroutine: Coroutine[Any, Any, Any]) -> None:
    """
    Execute une commande async via asyncio.run().

    Toute LibraryError devient une ligne rouge et le code de sortie 1.
    """
    try:
        asyncio.run(coroutine)
    except LibraryError as e:
        console.print(f"[red]Erreur :[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e
