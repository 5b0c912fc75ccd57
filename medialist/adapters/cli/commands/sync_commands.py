"""
Commandes CLI liees au service de suivi : synchronisation et connexion.
"""

from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.prompt import Prompt

from medialist.adapters.cli.display import console, format_sync_outcome, render_sync_report
from medialist.adapters.cli.helpers import run_command, suppress_loguru, with_container


def sync() -> None:
    """Synchronise la progression de toutes les series avec le service de suivi."""
    run_command(_sync_async())


@with_container()
async def _sync_async(container) -> None:
    """Implementation async de la commande sync."""
    from medialist.services.sync import SyncOutcome

    library = container.library_service()
    sync_service = container.sync_service()

    total = len(library.list_shows())
    if total == 0:
        console.print("[yellow]Aucune serie a synchroniser.[/yellow]")
        return

    console.print(f"[bold cyan]Synchronisation[/bold cyan] : {total} serie(s)\n")

    with suppress_loguru():
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
            transient=False,
        ) as progress_bar:
            task = progress_bar.add_task("[cyan]Synchronisation...", total=total)

            def on_progress(outcome: SyncOutcome) -> None:
                """Callback de progression."""
                progress_bar.advance(task)
                progress_bar.console.print(format_sync_outcome(outcome))

            report = await sync_service.run_sync_pass(on_progress=on_progress)

    render_sync_report(report)


def login() -> None:
    """Connecte medialist au service de suivi (OAuth)."""
    run_command(_login_async())


@with_container(requires_db=False)
async def _login_async(container) -> None:
    """Implementation async de la commande login."""
    service = container.tracking_service()
    url = service.authorization_url()
    if url is None:
        console.print(f"[green]Deja connecte[/green] ({service.service_type.value})")
        return

    console.print("Ouvrir cette adresse, autoriser medialist puis coller l'URL de redirection :")
    console.print(f"[link={url}]{url}[/link]", soft_wrap=True)
    callback = Prompt.ask("URL de redirection (ou code)", console=console)

    with suppress_loguru():
        await service.login(callback)
    console.print("[green]Connexion reussie.[/green]")
