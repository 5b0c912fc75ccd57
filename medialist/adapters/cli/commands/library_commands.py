"""
Commandes CLI de gestion de la bibliotheque : liste, importation, ajout
d'episode, progression, suppression et recherche.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.markup import escape
from rich.prompt import Confirm, Prompt

from medialist.adapters.cli.display import (
    console,
    render_episodes,
    render_plan,
    render_search_results,
    render_shows,
)
from medialist.adapters.cli.helpers import run_command, suppress_loguru, with_container
from medialist.core.entities.media import TitleSort
from medialist.core.errors import AuthError, ParseError
from medialist.services.reconciler import PlanState


def list_shows(
    sort: Annotated[
        Optional[TitleSort],
        typer.Option("--sort", "-s", help="Ordre des series (defaut: configuration)"),
    ] = None,
    show_id: Annotated[
        Optional[int],
        typer.Option("--show", help="Affiche les episodes de cette serie"),
    ] = None,
) -> None:
    """Affiche les series de la bibliotheque."""
    run_command(_list_async(sort, show_id))


@with_container()
async def _list_async(container, sort: Optional[TitleSort], show_id: Optional[int]) -> None:
    """Implementation async de la commande list."""
    library = container.library_service()

    if container.config().update_progress_on_start:
        try:
            with suppress_loguru():
                await container.sync_service().run_sync_pass()
        except AuthError as e:
            console.print(f"[yellow]Synchronisation ignoree :[/yellow] {escape(str(e))}")

    if show_id is not None:
        console.print(render_episodes(library.get_show(show_id)))
        return

    shows = library.list_shows(sort)
    if not shows:
        console.print("[yellow]Bibliotheque vide.[/yellow]")
        console.print("[dim]Utiliser 'medialist import DOSSIER' pour ajouter une serie.[/dim]")
        return
    console.print(render_shows(shows))


def import_show(
    path: Annotated[
        Path,
        typer.Argument(help="Dossier de la serie (ou fichier video unique)"),
    ],
    title: Annotated[
        Optional[str],
        typer.Option("--title", "-t", help="Titre (defaut: devine depuis les fichiers)"),
    ] = None,
    service_id: Annotated[
        int,
        typer.Option("--service-id", "-i", help="ID de la serie sur le service de suivi"),
    ] = 0,
    numbers: Annotated[
        Optional[str],
        typer.Option("--numbers", "-n", help="Episodes possedes si le nombre differe, ex: 8,10-12"),
    ] = None,
) -> None:
    """Importe une serie et ses fichiers video."""
    run_command(_import_async(path.expanduser(), title, service_id, numbers))


@with_container()
async def _import_async(
    container,
    path: Path,
    title: Optional[str],
    service_id: int,
    numbers: Optional[str],
) -> None:
    """Implementation async de la commande import."""
    library = container.library_service()

    with suppress_loguru():
        draft = await library.prepare_import(path, title=title, service_id=service_id)

    console.print(f"[bold cyan]Importation[/bold cyan] : {escape(draft.title)}\n")
    render_plan(draft.plan)

    if draft.plan.state is PlanState.LOCAL_AHEAD:
        console.print("[dim]Corriger les fichiers ou l'ID du service puis recommencer.[/dim]")
        raise typer.Exit(code=1)

    if draft.plan.state is PlanState.AWAITING_NUMBERS:
        if numbers is not None:
            draft = library.resolve_mismatch(draft, numbers)
        else:
            while draft.plan.state is PlanState.AWAITING_NUMBERS:
                answer = Prompt.ask("Episodes possedes (ex: 8,10-12)", console=console)
                try:
                    draft = library.resolve_mismatch(draft, answer)
                except ParseError as e:
                    console.print(f"[red]{escape(str(e))}[/red]")
        render_plan(draft.plan)

    with suppress_loguru():
        result = await library.save_import(draft)

    verb = "creee" if result.created else "completee"
    console.print(
        f"\n[green]Serie {verb}[/green] (ID {result.local_id}) : "
        f"{len(result.episodes)} episode(s) enregistre(s)"
    )


def add_episode(
    show_id: Annotated[int, typer.Argument(help="ID local de la serie")],
    path: Annotated[Path, typer.Argument(help="Fichier video a ajouter")],
) -> None:
    """Ajoute un fichier video comme episode suivant d'une serie."""
    run_command(_add_episode_async(show_id, path.expanduser()))


@with_container()
async def _add_episode_async(container, show_id: int, path: Path) -> None:
    """Implementation async de la commande add-episode."""
    library = container.library_service()
    with suppress_loguru():
        episode = await library.add_episode(show_id, path)
    console.print(f"[green]Episode {episode.number} ajoute[/green] : {escape(episode.path.name)}")


def progress(
    show_id: Annotated[int, typer.Argument(help="ID local de la serie")],
    set_value: Annotated[
        Optional[int],
        typer.Option("--set", help="Fixe la progression", min=0),
    ] = None,
    inc: Annotated[bool, typer.Option("--inc", help="Episode suivant vu")] = False,
    dec: Annotated[bool, typer.Option("--dec", help="Annule le dernier episode vu")] = False,
) -> None:
    """Modifie la progression d'une serie (envoyee au service si liee)."""
    if sum([set_value is not None, inc, dec]) != 1:
        raise typer.BadParameter("Utiliser exactement une option parmi --set, --inc, --dec")
    run_command(_progress_async(show_id, set_value, inc, dec))


@with_container()
async def _progress_async(
    container,
    show_id: int,
    set_value: Optional[int],
    inc: bool,
    dec: bool,
) -> None:
    """Implementation async de la commande progress."""
    library = container.library_service()
    with suppress_loguru():
        if set_value is not None:
            value = await library.set_progress(show_id, set_value)
        else:
            value = await library.change_progress(show_id, 1 if inc else -1)
    console.print(f"Progression : [bold]{value}[/bold]")


def delete(
    show_id: Annotated[int, typer.Argument(help="ID local de la serie")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Ne pas demander de confirmation")] = False,
) -> None:
    """Supprime une serie et ses episodes (les fichiers sont conserves)."""
    run_command(_delete_async(show_id, yes))


@with_container()
async def _delete_async(container, show_id: int, yes: bool) -> None:
    """Implementation async de la commande delete."""
    library = container.library_service()
    show = library.get_show(show_id)
    if not yes and not Confirm.ask(
        f"Supprimer '{escape(show.title)}' et ses {len(show.episodes)} episode(s) ?",
        console=console,
        default=False,
    ):
        console.print("[dim]Suppression annulee.[/dim]")
        return
    library.delete_show(show_id)
    console.print(f"[green]Serie supprimee[/green] : {escape(show.title)}")


def search(
    text: Annotated[str, typer.Argument(help="Titre a rechercher")],
) -> None:
    """Recherche une serie sur le service de suivi."""
    run_command(_search_async(text))


@with_container()
async def _search_async(container, text: str) -> None:
    """Implementation async de la commande search."""
    library = container.library_service()
    with suppress_loguru():
        results = await library.search_titles(text)
    if not results:
        console.print("[yellow]Aucun resultat.[/yellow]")
        return
    console.print(render_search_results(results))
