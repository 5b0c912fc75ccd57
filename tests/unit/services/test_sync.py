"""
Tests unitaires pour SyncService.

Tests couvrant :
- Pull : service en avance, progression locale remplacee
- Push : local en avance, service mis a jour
- Egalite et series non liees
- Connexion requise et arret a la premiere erreur
"""

from unittest.mock import MagicMock

import pytest

from medialist.core.errors import AuthError, RemoteError
from medialist.infrastructure.persistence.repositories import SQLModelShowRepository
from medialist.services.sync import SyncAction, SyncService


@pytest.fixture
def sync(show_repo: SQLModelShowRepository, mock_tracking_service: MagicMock) -> SyncService:
    return SyncService(show_repo, mock_tracking_service)


class TestSyncShow:
    """Tests de la decision pour une serie."""

    @pytest.mark.asyncio
    async def test_remote_ahead_pulls(
        self, sync: SyncService, show_repo: SQLModelShowRepository, mock_tracking_service
    ) -> None:
        """Local 2, distant 5 : local passe a 5 sans appel d'ecriture distant."""
        local_id = show_repo.create_show("Frieren", service_id=52991, progress=2)
        mock_tracking_service.remote_progress.return_value = 5

        outcome = await sync.sync_show(show_repo.get_show(local_id))

        assert outcome.action is SyncAction.PULLED
        assert outcome.final_progress == 5
        assert show_repo.get_show(local_id).progress == 5
        mock_tracking_service.set_remote_progress.assert_not_called()

    @pytest.mark.asyncio
    async def test_local_ahead_pushes(
        self, sync: SyncService, show_repo: SQLModelShowRepository, mock_tracking_service
    ) -> None:
        """Local 5, distant 2 : le service recoit 5, local inchange."""
        local_id = show_repo.create_show("Frieren", service_id=52991, progress=5)
        mock_tracking_service.remote_progress.return_value = 2

        outcome = await sync.sync_show(show_repo.get_show(local_id))

        assert outcome.action is SyncAction.PUSHED
        mock_tracking_service.set_remote_progress.assert_awaited_once_with(52991, 5)
        assert show_repo.get_show(local_id).progress == 5

    @pytest.mark.asyncio
    async def test_absent_from_remote_list_pushes(
        self, sync: SyncService, show_repo: SQLModelShowRepository, mock_tracking_service
    ) -> None:
        """Une serie absente de la liste distante compte comme progression 0."""
        local_id = show_repo.create_show("Frieren", service_id=52991, progress=3)
        mock_tracking_service.remote_progress.return_value = None

        outcome = await sync.sync_show(show_repo.get_show(local_id))

        assert outcome.action is SyncAction.PUSHED
        assert outcome.remote_progress == 0

    @pytest.mark.asyncio
    async def test_capped_push_lowers_local_progress(
        self, sync: SyncService, show_repo: SQLModelShowRepository, mock_tracking_service
    ) -> None:
        """Le service borne la progression : le local s'aligne sur la valeur acceptee."""
        local_id = show_repo.create_show("Frieren", service_id=52991, progress=30)
        mock_tracking_service.remote_progress.return_value = 10
        mock_tracking_service.set_remote_progress.side_effect = None
        mock_tracking_service.set_remote_progress.return_value = 28

        outcome = await sync.sync_show(show_repo.get_show(local_id))

        assert outcome.final_progress == 28
        assert show_repo.get_show(local_id).progress == 28

    @pytest.mark.asyncio
    async def test_equal_progress_is_unchanged(
        self, sync: SyncService, show_repo: SQLModelShowRepository, mock_tracking_service
    ) -> None:
        local_id = show_repo.create_show("Frieren", service_id=52991, progress=4)
        mock_tracking_service.remote_progress.return_value = 4

        outcome = await sync.sync_show(show_repo.get_show(local_id))

        assert outcome.action is SyncAction.UNCHANGED
        mock_tracking_service.set_remote_progress.assert_not_called()

    @pytest.mark.asyncio
    async def test_unlinked_show_is_skipped(
        self, sync: SyncService, show_repo: SQLModelShowRepository, mock_tracking_service
    ) -> None:
        local_id = show_repo.create_show("Home Movies", progress=2)

        outcome = await sync.sync_show(show_repo.get_show(local_id))

        assert outcome.action is SyncAction.SKIPPED
        mock_tracking_service.remote_progress.assert_not_called()


class TestRunSyncPass:
    """Tests d'une passe complete."""

    @pytest.mark.asyncio
    async def test_requires_authentication(
        self, sync: SyncService, show_repo: SQLModelShowRepository, mock_tracking_service
    ) -> None:
        """Non connecte : AuthError et aucune serie touchee."""
        show_repo.create_show("Frieren", service_id=52991, progress=2)
        mock_tracking_service.is_authenticated.return_value = False

        with pytest.raises(AuthError):
            await sync.run_sync_pass()

        mock_tracking_service.remote_progress.assert_not_called()

    @pytest.mark.asyncio
    async def test_report_counts_each_action(
        self, sync: SyncService, show_repo: SQLModelShowRepository, mock_tracking_service
    ) -> None:
        show_repo.create_show("Pulled", service_id=1, progress=1)
        show_repo.create_show("Pushed", service_id=2, progress=9)
        show_repo.create_show("Same", service_id=3, progress=4)
        show_repo.create_show("Unlinked")
        remote = {1: 6, 2: 3, 3: 4}
        mock_tracking_service.remote_progress.side_effect = lambda service_id: remote[service_id]
        seen = []

        report = await sync.run_sync_pass(on_progress=seen.append)

        assert (report.pulled, report.pushed, report.unchanged, report.skipped) == (1, 1, 1, 1)
        assert report.total == 4
        assert [outcome.title for outcome in seen] == ["Pulled", "Pushed", "Same", "Unlinked"]

    @pytest.mark.asyncio
    async def test_first_failure_aborts_pass(
        self, sync: SyncService, show_repo: SQLModelShowRepository, mock_tracking_service
    ) -> None:
        """La deuxieme serie echoue : la premiere reste synchronisee, la troisieme intacte."""
        first = show_repo.create_show("First", service_id=1, progress=0)
        show_repo.create_show("Second", service_id=2, progress=0)
        third = show_repo.create_show("Third", service_id=3, progress=0)

        def remote_progress(service_id: int) -> int:
            if service_id == 2:
                raise RemoteError("503")
            return 7

        mock_tracking_service.remote_progress.side_effect = remote_progress

        with pytest.raises(RemoteError):
            await sync.run_sync_pass()

        assert show_repo.get_show(first).progress == 7
        assert show_repo.get_show(third).progress == 0
        assert mock_tracking_service.remote_progress.await_count == 2
