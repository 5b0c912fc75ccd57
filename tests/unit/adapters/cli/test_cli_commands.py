"""
Tests unitaires pour les commandes CLI.

Le Container est remplace par un mock : les commandes sont testees de
bout en bout via CliRunner, sans base ni reseau.

Tests couvrant :
- list : bibliotheque vide, tableau, synchronisation au demarrage
- import : numerotation automatique, --numbers, saisie interactive, local en avance
- progress : options exclusives
- delete : confirmation
- sync, search, login
- erreurs du domaine : message rouge et code de sortie 1
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from medialist.core.entities.media import Show
from medialist.core.errors import AuthError, NotFound
from medialist.core.ports.tracking_service import ServiceTitle, ServiceType
from medialist.main import app
from medialist.services.library import ImportDraft, ImportResult
from medialist.services.reconciler import (
    EpisodePlan,
    EpisodeReconciler,
    PlannedEpisode,
    PlanState,
)
from medialist.services.sync import SyncReport

runner = CliRunner()

_FILES = [Path(f"/videos/Show/Show - {n:02d}.mkv") for n in (1, 2, 3)]


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def mock_container():
    """Mock le Container pour les tests.

    Patche Container dans helpers.py car c'est la que le decorateur
    @with_container() l'importe et l'instancie.
    """
    with patch("medialist.adapters.cli.helpers.Container") as mock_cls:
        container_instance = MagicMock()
        mock_cls.return_value = container_instance
        container_instance.database.init = MagicMock()
        container_instance.config.return_value = MagicMock(update_progress_on_start=False)
        container_instance.tracking_service.return_value.close = AsyncMock()
        yield container_instance


@pytest.fixture
def library(mock_container) -> MagicMock:
    library = MagicMock()
    library.prepare_import = AsyncMock()
    library.save_import = AsyncMock()
    library.add_episode = AsyncMock()
    library.set_progress = AsyncMock()
    library.change_progress = AsyncMock()
    library.search_titles = AsyncMock(return_value=[])
    mock_container.library_service.return_value = library
    return library


def _draft(state: PlanState, episodes: list[PlannedEpisode] | None = None) -> ImportDraft:
    plan = EpisodePlan(
        files=list(_FILES),
        service_id=52991,
        expected_count=12 if state is PlanState.AWAITING_NUMBERS else 0,
        state=state,
        episodes=episodes or [],
    )
    return ImportDraft(path=Path("/videos/Show"), title="Show", service_id=52991, plan=plan)


def _resolving(library: MagicMock) -> None:
    """resolve_mismatch delegue au vrai reconciliateur."""
    reconciler = EpisodeReconciler(MagicMock(), MagicMock(), MagicMock())

    def resolve(draft: ImportDraft, text: str) -> ImportDraft:
        return ImportDraft(
            path=draft.path,
            title=draft.title,
            service_id=draft.service_id,
            plan=reconciler.resolve_mismatch(draft.plan, text),
        )

    library.resolve_mismatch.side_effect = resolve


# ============================================================================
# list
# ============================================================================


class TestListCommand:
    """Tests de la commande list."""

    def test_empty_library(self, library: MagicMock) -> None:
        library.list_shows.return_value = []

        result = runner.invoke(app, ["list"])

        assert result.exit_code == 0
        assert "Bibliotheque vide" in result.output

    def test_lists_shows_with_sort(self, library: MagicMock) -> None:
        library.list_shows.return_value = [
            Show(local_id=1, title="Akira", service_id=47, progress=1),
        ]

        result = runner.invoke(app, ["list", "--sort", "title_desc"])

        assert result.exit_code == 0
        assert "Akira" in result.output
        sort = library.list_shows.call_args.args[0]
        assert sort.value == "title_desc"

    def test_sync_on_start_warns_when_logged_out(
        self, mock_container: MagicMock, library: MagicMock
    ) -> None:
        mock_container.config.return_value.update_progress_on_start = True
        mock_container.sync_service.return_value.run_sync_pass = AsyncMock(
            side_effect=AuthError("Connexion requise")
        )
        library.list_shows.return_value = []

        result = runner.invoke(app, ["list"])

        assert result.exit_code == 0
        assert "Synchronisation ignoree" in result.output

    def test_unknown_show_exits_with_error(self, library: MagicMock) -> None:
        library.get_show.side_effect = NotFound("Serie 9 introuvable")

        result = runner.invoke(app, ["list", "--show", "9"])

        assert result.exit_code == 1
        assert "Serie 9 introuvable" in result.output

    def test_error_message_with_brackets(self, library: MagicMock) -> None:
        library.get_show.side_effect = NotFound("Serie '[/x]' introuvable")

        result = runner.invoke(app, ["list", "--show", "9"])

        assert result.exit_code == 1
        assert "Serie '[/x]' introuvable" in result.output


# ============================================================================
# import
# ============================================================================


class TestImportCommand:
    """Tests de la commande import."""

    def test_auto_numbered_import(self, library: MagicMock) -> None:
        episodes = [PlannedEpisode(n, path) for n, path in enumerate(_FILES, start=1)]
        library.prepare_import.return_value = _draft(PlanState.AUTO_NUMBERED, episodes)
        library.save_import.return_value = ImportResult(local_id=1, created=True, episodes=episodes)

        result = runner.invoke(app, ["import", "/videos/Show", "-i", "52991"])

        assert result.exit_code == 0
        assert "Serie creee" in result.output
        library.prepare_import.assert_awaited_once_with(
            Path("/videos/Show"), title=None, service_id=52991
        )
        library.resolve_mismatch.assert_not_called()

    def test_numbers_option_resolves_mismatch(self, library: MagicMock) -> None:
        library.prepare_import.return_value = _draft(PlanState.AWAITING_NUMBERS)
        _resolving(library)
        library.save_import.return_value = ImportResult(local_id=1, created=True, episodes=[])

        result = runner.invoke(app, ["import", "/videos/Show", "-n", "1,5,9"])

        assert result.exit_code == 0
        saved = library.save_import.call_args.args[0]
        assert [e.number for e in saved.plan.episodes] == [1, 5, 9]

    def test_prompts_until_numbers_are_valid(self, library: MagicMock) -> None:
        """Une saisie invalide est signalee puis redemandee."""
        library.prepare_import.return_value = _draft(PlanState.AWAITING_NUMBERS)
        _resolving(library)
        library.save_import.return_value = ImportResult(local_id=1, created=True, episodes=[])

        result = runner.invoke(app, ["import", "/videos/Show"], input="1,2\n10-12\n")

        assert result.exit_code == 0
        assert library.resolve_mismatch.call_count == 2
        saved = library.save_import.call_args.args[0]
        assert [e.number for e in saved.plan.episodes] == [10, 11, 12]

    def test_invalid_numbers_option_exits_with_error(self, library: MagicMock) -> None:
        library.prepare_import.return_value = _draft(PlanState.AWAITING_NUMBERS)
        _resolving(library)

        result = runner.invoke(app, ["import", "/videos/Show", "-n", "3-1"])

        assert result.exit_code == 1
        library.save_import.assert_not_called()

    def test_local_ahead_is_not_saved(self, library: MagicMock) -> None:
        library.prepare_import.return_value = _draft(PlanState.LOCAL_AHEAD)

        result = runner.invoke(app, ["import", "/videos/Show"])

        assert result.exit_code == 1
        library.save_import.assert_not_called()

    def test_tracking_service_is_closed(
        self, mock_container: MagicMock, library: MagicMock
    ) -> None:
        library.prepare_import.return_value = _draft(PlanState.LOCAL_AHEAD)

        runner.invoke(app, ["import", "/videos/Show"])

        mock_container.tracking_service.return_value.close.assert_awaited_once()


# ============================================================================
# progress / delete / add-episode
# ============================================================================


class TestProgressCommand:
    """Tests de la commande progress."""

    def test_set_progress(self, library: MagicMock) -> None:
        library.set_progress.return_value = 7

        result = runner.invoke(app, ["progress", "1", "--set", "7"])

        assert result.exit_code == 0
        assert "7" in result.output
        library.set_progress.assert_awaited_once_with(1, 7)

    def test_inc_and_dec(self, library: MagicMock) -> None:
        library.change_progress.return_value = 1

        runner.invoke(app, ["progress", "1", "--inc"])
        runner.invoke(app, ["progress", "1", "--dec"])

        deltas = [call.args[1] for call in library.change_progress.await_args_list]
        assert deltas == [1, -1]

    def test_options_are_exclusive(self, library: MagicMock) -> None:
        result = runner.invoke(app, ["progress", "1", "--inc", "--dec"])

        assert result.exit_code != 0
        library.change_progress.assert_not_called()


class TestDeleteCommand:
    """Tests de la commande delete."""

    def test_confirmation_refused(self, library: MagicMock) -> None:
        library.get_show.return_value = Show(local_id=1, title="Akira")

        result = runner.invoke(app, ["delete", "1"], input="n\n")

        assert result.exit_code == 0
        library.delete_show.assert_not_called()

    def test_yes_skips_confirmation(self, library: MagicMock) -> None:
        library.get_show.return_value = Show(local_id=1, title="Akira")

        result = runner.invoke(app, ["delete", "1", "--yes"])

        assert result.exit_code == 0
        library.delete_show.assert_called_once_with(1)

    def test_bracketed_title_is_printed_verbatim(self, library: MagicMock) -> None:
        library.get_show.return_value = Show(local_id=1, title="[/bad] Akira")

        result = runner.invoke(app, ["delete", "1"], input="y\n")

        assert result.exit_code == 0
        assert "Supprimer '[/bad] Akira'" in result.output
        assert "Serie supprimee : [/bad] Akira" in result.output


class TestAddEpisodeCommand:
    """Tests de la commande add-episode."""

    def test_add_episode(self, library: MagicMock) -> None:
        library.add_episode.return_value = PlannedEpisode(4, Path("/videos/Show/04.mkv"))

        result = runner.invoke(app, ["add-episode", "1", "/videos/Show/04.mkv"])

        assert result.exit_code == 0
        assert "Episode 4 ajoute" in result.output

    def test_bracketed_filename_is_printed_verbatim(self, library: MagicMock) -> None:
        path = Path("/videos/Show/Show - 04 [horriblesubs].mkv")
        library.add_episode.return_value = PlannedEpisode(4, path)

        result = runner.invoke(app, ["add-episode", "1", str(path)])

        assert result.exit_code == 0
        assert "Show - 04 [horriblesubs].mkv" in result.output


# ============================================================================
# sync / search / login
# ============================================================================


class TestServiceCommands:
    """Tests des commandes liees au service de suivi."""

    def test_sync_reports_counts(self, mock_container: MagicMock, library: MagicMock) -> None:
        library.list_shows.return_value = [Show(local_id=1, title="Akira", service_id=47)]
        mock_container.sync_service.return_value.run_sync_pass = AsyncMock(
            return_value=SyncReport(pulled=1)
        )

        result = runner.invoke(app, ["sync"])

        assert result.exit_code == 0
        assert "Resume de la synchronisation" in result.output

    def test_sync_requires_login(self, mock_container: MagicMock, library: MagicMock) -> None:
        library.list_shows.return_value = [Show(local_id=1, title="Akira", service_id=47)]
        mock_container.sync_service.return_value.run_sync_pass = AsyncMock(
            side_effect=AuthError("Connexion au service de suivi requise")
        )

        result = runner.invoke(app, ["sync"])

        assert result.exit_code == 1
        assert "Connexion au service de suivi requise" in result.output

    def test_search_results(self, library: MagicMock) -> None:
        library.search_titles.return_value = [ServiceTitle(52991, "Sousou no Frieren")]

        result = runner.invoke(app, ["search", "Frieren"])

        assert result.exit_code == 0
        assert "52991" in result.output

    def test_login_when_already_connected(self, mock_container: MagicMock) -> None:
        service = mock_container.tracking_service.return_value
        service.authorization_url.return_value = None
        service.service_type = ServiceType.MAL

        result = runner.invoke(app, ["login"])

        assert result.exit_code == 0
        assert "Deja connecte" in result.output
        mock_container.database.init.assert_not_called()

    def test_login_exchanges_callback(self, mock_container: MagicMock) -> None:
        service = mock_container.tracking_service.return_value
        service.authorization_url.return_value = "https://myanimelist.net/v1/oauth2/authorize?x=1"
        service.login = AsyncMock()

        result = runner.invoke(app, ["login"], input="http://localhost:2525/?code=abc\n")

        assert result.exit_code == 0
        service.login.assert_awaited_once_with("http://localhost:2525/?code=abc")
