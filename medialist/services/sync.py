"""
Synchronisation de la progression avec le service de suivi.

Une passe compare, pour chaque serie liee, la progression locale a celle du
service et copie la plus grande vers l'autre cote :
- service en avance : la progression locale est remplacee (pull) ;
- local en avance : le service est mis a jour (push) ;
- egalite : rien.

Il n'y a pas de detection de conflit : si les deux cotes ont change depuis
la derniere passe, la plus grande valeur l'emporte. La premiere erreur
interrompt la passe ; les series deja traitees restent a jour.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from loguru import logger

from medialist.core.entities.media import Show
from medialist.core.errors import AuthError
from medialist.core.ports.repositories import IShowRepository
from medialist.core.ports.tracking_service import ITrackingService


class SyncAction(Enum):
    """Decision prise pour une serie."""

    PULLED = "pulled"
    PUSHED = "pushed"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"


@dataclass
class SyncOutcome:
    """Resultat de la synchronisation d'une serie."""

    local_id: int
    title: str
    action: SyncAction
    local_progress: int
    remote_progress: int
    final_progress: int


@dataclass
class SyncReport:
    """Bilan d'une passe de synchronisation."""

    pulled: int = 0
    pushed: int = 0
    unchanged: int = 0
    skipped: int = 0
    outcomes: list[SyncOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    def record(self, outcome: SyncOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.action is SyncAction.PULLED:
            self.pulled += 1
        elif outcome.action is SyncAction.PUSHED:
            self.pushed += 1
        elif outcome.action is SyncAction.UNCHANGED:
            self.unchanged += 1
        else:
            self.skipped += 1


class SyncService:
    """
    Moteur de synchronisation de la progression.

    Exemple :
        sync = SyncService(show_repository, tracking_service)
        report = await sync.run_sync_pass()
    """

    def __init__(
        self,
        show_repository: IShowRepository,
        tracking_service: ITrackingService,
    ) -> None:
        """
        Args :
            show_repository : Stockage des series
            tracking_service : Service de suivi detenant la progression distante
        """
        self._shows = show_repository
        self._service = tracking_service

    async def sync_show(self, show: Show) -> SyncOutcome:
        """
        Synchronise une seule serie.

        Une serie non liee n'est pas envoyee au service.

        Leve :
            RemoteError : Si le service ne repond pas
            StorageError : Si la progression locale ne peut etre ecrite
        """
        local = show.progress
        if not show.is_linked:
            return SyncOutcome(show.local_id, show.title, SyncAction.SKIPPED, local, 0, local)

        remote = await self._service.remote_progress(show.service_id) or 0

        if remote > local:
            self._shows.set_progress(show.local_id, remote)
            logger.info("Progression recuperee du service", title=show.title, local=local, remote=remote)
            return SyncOutcome(show.local_id, show.title, SyncAction.PULLED, local, remote, remote)

        if remote < local:
            accepted = await self._service.set_remote_progress(show.service_id, local)
            final = local
            if accepted < local:
                # Le service borne la progression au nombre d'episodes
                self._shows.set_progress(show.local_id, accepted)
                final = accepted
            logger.info(
                "Progression envoyee au service",
                title=show.title,
                local=local,
                remote=remote,
                accepted=accepted,
            )
            return SyncOutcome(show.local_id, show.title, SyncAction.PUSHED, local, remote, final)

        return SyncOutcome(show.local_id, show.title, SyncAction.UNCHANGED, local, remote, local)

    async def run_sync_pass(
        self,
        on_progress: Optional[Callable[[SyncOutcome], None]] = None,
    ) -> SyncReport:
        """
        Synchronise toutes les series de la bibliotheque.

        Args :
            on_progress : Callback appele apres chaque serie traitee

        Retourne :
            Bilan de la passe

        Leve :
            AuthError : Si l'utilisateur n'est pas connecte (aucune serie traitee)
            RemoteError, StorageError : Premiere erreur rencontree, la passe s'arrete
        """
        if not self._service.is_authenticated():
            raise AuthError("Connexion au service de suivi requise pour synchroniser")

        report = SyncReport()
        for show in self._shows.list_shows():
            outcome = await self.sync_show(show)
            report.record(outcome)
            if on_progress:
                on_progress(outcome)

        logger.info(
            "Synchronisation terminee",
            pulled=report.pulled,
            pushed=report.pushed,
            unchanged=report.unchanged,
            skipped=report.skipped,
        )
        return report
