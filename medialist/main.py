"""
Point d'entree CLI de medialist.

Configure le logging, initialise la base et monte les commandes CLI.
"""

import typer
from loguru import logger

from medialist import __version__
from medialist.adapters.cli.commands import (
    add_episode,
    delete,
    import_show,
    list_shows,
    login,
    progress,
    search,
    sync,
)
from medialist.adapters.cli.display import console
from medialist.config import Settings, load_settings
from medialist.core.errors import LibraryError
from medialist.logging_config import configure_logging

app = typer.Typer(
    name="medialist",
    help="Suivi de series : bibliotheque locale synchronisee avec un service de suivi",
)

# "list" et "import" masqueraient des builtins / mots reserves Python
app.command(name="list")(list_shows)
app.command(name="import")(import_show)
app.command(name="add-episode")(add_episode)
app.command()(progress)
app.command()(delete)
app.command()(sync)
app.command()(search)
app.command()(login)


def get_config() -> Settings:
    """Charge les parametres ; une configuration invalide arrete la commande."""
    try:
        return load_settings()
    except LibraryError as e:
        console.print(f"[red]Erreur :[/red] {e}")
        raise typer.Exit(code=1) from e


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = get_config()
    typer.echo(f"Donnees : {config.data_dir}")
    typer.echo(f"Base de donnees : {config.resolved_database_url}")
    typer.echo(f"Service : {config.service.value}")
    typer.echo(f"MyAnimeList : {'active' if config.mal_enabled else 'desactive'}")
    typer.echo(f"Tri par defaut : {config.title_sort.value}")
    typer.echo(f"Niveau de log : {config.log_level}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"medialist v{__version__}")


def main() -> None:
    """Point d'entree de l'application."""
    try:
        settings = load_settings()
        configure_logging(settings)
    except LibraryError as e:
        console.print(f"[red]Erreur :[/red] {e}")
        raise SystemExit(1) from e
    logger.debug("Demarrage de medialist", version=__version__)
    app()


if __name__ == "__main__":
    main()
