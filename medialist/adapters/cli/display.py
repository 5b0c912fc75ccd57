"""
Affichage Rich de la bibliotheque.

Fonctions de rendu des series, episodes, plans d'importation, resultats de
recherche et bilans de synchronisation.
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from medialist.core.entities.media import Episode, Show
from medialist.core.ports.tracking_service import ServiceTitle
from medialist.services.reconciler import EpisodePlan, PlanState
from medialist.services.sync import SyncAction, SyncOutcome, SyncReport

console = Console()

_SYNC_STYLES = {
    SyncAction.PULLED: ("[cyan]<-[/cyan]", "recuperee du service"),
    SyncAction.PUSHED: ("[green]->[/green]", "envoyee au service"),
    SyncAction.UNCHANGED: ("[dim]=[/dim]", "a jour"),
    SyncAction.SKIPPED: ("[dim]-[/dim]", "non liee, ignoree"),
}


def _episode_label(episode: Episode) -> str:
    flags = []
    if episode.recap:
        flags.append("recap")
    if episode.filler:
        flags.append("filler")
    label = escape(episode.title or episode.path.name)
    if flags:
        label += f" [dim]({', '.join(flags)})[/dim]"
    if episode.file_deleted:
        label = f"[strike]{label}[/strike]"
    return label


def render_shows(shows: list[Show]) -> Table:
    """Tableau des series (ID, titre, service, progression, episodes)."""
    table = Table(title="Bibliotheque", show_lines=False)
    table.add_column("ID", justify="right", style="bold")
    table.add_column("Titre")
    table.add_column("Service", justify="right")
    table.add_column("Progression", justify="right")
    table.add_column("Episodes", justify="right")

    for show in shows:
        progress = str(show.progress)
        last = show.last_episode_number
        if last and show.progress >= last:
            progress = f"[green]{progress}[/green]"
        table.add_row(
            str(show.local_id),
            escape(show.title),
            str(show.service_id) if show.is_linked else "[dim]-[/dim]",
            progress,
            str(len(show.episodes)),
        )
    return table


def render_episodes(show: Show) -> Table:
    """Tableau des episodes d'une serie ; les fichiers disparus sont barres."""
    table = Table(title=escape(show.title))
    table.add_column("#", justify="right", style="bold")
    table.add_column("Episode")
    table.add_column("Note", justify="right")
    table.add_column("Diffusion")

    for episode in show.episodes:
        number = str(episode.number)
        if episode.number <= show.progress:
            number = f"[green]{number}[/green]"
        table.add_row(
            number,
            _episode_label(episode),
            f"{episode.score:g}" if episode.score is not None else "",
            (episode.aired or "")[:10],
        )
    return table


def render_plan(plan: EpisodePlan) -> None:
    """Resume du plan de rattachement avant enregistrement."""
    expected = str(plan.expected_count) if plan.expected_count else "inconnu"
    console.print(f"Episodes annonces : [bold]{expected}[/bold]")
    console.print(f"Fichiers video trouves : [bold]{plan.discovered_count}[/bold]")

    if plan.state is PlanState.AWAITING_NUMBERS:
        console.print(
            "[yellow]Nombre de fichiers different du nombre d'episodes.[/yellow]"
        )
        for path in plan.files:
            console.print(f"  [dim]-[/dim] {escape(path.name)}")
        return

    if plan.state is PlanState.LOCAL_AHEAD:
        console.print(
            "[red]Plus de fichiers que d'episodes annonces : aucun episode rattache.[/red]"
        )
        return

    for episode in plan.episodes:
        console.print(f"  [bold]{episode.number:>4}[/bold] {escape(episode.path.name)}")


def render_search_results(results: list[ServiceTitle]) -> Table:
    table = Table(title="Resultats")
    table.add_column("ID service", justify="right", style="bold")
    table.add_column("Titre")
    for result in results:
        table.add_row(str(result.service_id), escape(result.title))
    return table


def format_sync_outcome(outcome: SyncOutcome) -> str:
    """Ligne de resultat pour une serie synchronisee."""
    symbol, label = _SYNC_STYLES[outcome.action]
    line = f"  {symbol} {escape(outcome.title)} - {label}"
    if outcome.action is SyncAction.PULLED:
        line += f" ({outcome.local_progress} -> {outcome.final_progress})"
    elif outcome.action is SyncAction.PUSHED:
        line += f" ({outcome.remote_progress} -> {outcome.final_progress})"
    return line


def render_sync_report(report: SyncReport) -> None:
    console.print()
    console.print("[bold]Resume de la synchronisation :[/bold]")
    console.print(f"  [cyan]Recuperees[/cyan] : {report.pulled}")
    console.print(f"  [green]Envoyees[/green] : {report.pushed}")
    console.print(f"  [dim]A jour[/dim] : {report.unchanged}")
    if report.skipped:
        console.print(f"  [dim]Non liees[/dim] : {report.skipped}")
