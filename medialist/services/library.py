"""
Service de bibliotheque : importation de series, ajout d'episodes et
progression.

Orchestre le prober, le reconciliateur, le stockage et le service de suivi
pour les commandes de la ligne de commande.
"""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from loguru import logger

from medialist.config import Settings
from medialist.core.entities.media import Show, TitleSort
from medialist.core.errors import ConstraintViolation, NotFound, ParseError
from medialist.core.ports.file_system import IVideoFileProber
from medialist.core.ports.repositories import IEpisodeRepository, IShowRepository
from medialist.core.ports.tracking_service import ITrackingService, ServiceTitle, ServiceType
from medialist.services.reconciler import (
    EpisodePlan,
    EpisodeReconciler,
    PlannedEpisode,
    PlanState,
)


@dataclass
class ImportDraft:
    """
    Importation en cours de preparation.

    Attributs :
        path : Dossier (ou fichier) importe
        title : Titre de la serie
        service_id : Serie sur le service de suivi (0 = non liee)
        plan : Plan de rattachement des episodes
    """

    path: Path
    title: str
    service_id: int
    plan: EpisodePlan


@dataclass
class ImportResult:
    """Resultat d'une importation enregistree."""

    local_id: int
    created: bool
    episodes: list[PlannedEpisode]


class LibraryService:
    """
    Cas d'usage de la bibliotheque.

    Exemple :
        draft = await library.prepare_import(Path("/videos/Frieren"), service_id=52991)
        if not draft.plan.is_ready:
            draft = library.resolve_mismatch(draft, "1-4,7")
        result = await library.save_import(draft)
    """

    def __init__(
        self,
        show_repository: IShowRepository,
        episode_repository: IEpisodeRepository,
        prober: IVideoFileProber,
        reconciler: EpisodeReconciler,
        tracking_service: ITrackingService,
        settings: Settings,
    ) -> None:
        self._shows = show_repository
        self._episodes = episode_repository
        self._prober = prober
        self._reconciler = reconciler
        self._service = tracking_service
        self._settings = settings

    def _remote_enabled(self, service_id: int) -> bool:
        return (
            service_id != 0
            and self._service.service_type is not ServiceType.LOCAL
            and self._service.is_authenticated()
        )

    def list_shows(self, sort: Optional[TitleSort] = None) -> list[Show]:
        """Series triees selon sort, ou l'ordre configure par defaut."""
        return self._shows.list_shows(sort or self._settings.title_sort)

    def get_show(self, local_id: int) -> Show:
        return self._shows.get_show(local_id)

    def delete_show(self, local_id: int) -> None:
        self._shows.delete_show(local_id)
        logger.info("Serie supprimee", local_id=local_id)

    async def search_titles(self, text: str) -> list[ServiceTitle]:
        return await self._service.search_titles(text)

    async def _remote_title(self, service_id: int) -> str:
        if self._settings.english_show_titles:
            alternatives = await self._service.alternative_titles(service_id)
            if alternatives is not None and alternatives.languages.get("en"):
                return alternatives.languages["en"]
        return await self._service.get_title(service_id)

    def _existing_last_episode(self, title: str) -> int:
        try:
            local_id = self._shows.find_show_id_by_title(title)
        except NotFound:
            return 0
        return self._episodes.last_episode_number(local_id)

    async def prepare_import(
        self,
        path: Path,
        title: Optional[str] = None,
        service_id: int = 0,
    ) -> ImportDraft:
        """
        Prepare l'importation des fichiers video sous path.

        Sans titre explicite, le titre du service (autofill_title) ou a
        defaut le titre devine depuis les noms de fichiers est utilise. Si la
        serie existe deja, les episodes sont numerotes a la suite.

        Leve :
            FileProbeError : Si path est illisible
            ParseError : Si aucun titre ne peut etre determine
            RemoteError : Si le service de suivi echoue
        """
        if not title:
            title = ""
            if self._settings.autofill_title and self._remote_enabled(service_id):
                title = await self._remote_title(service_id)
            if not title:
                title = self._prober.guess_title(path)
        title = title.strip()
        if not title:
            raise ParseError(f"Impossible de deviner un titre pour {path}")

        start_after = self._existing_last_episode(title)
        plan = await self._reconciler.plan(path, service_id=service_id, start_after=start_after)
        logger.debug(
            "Importation preparee",
            title=title,
            service_id=service_id,
            state=plan.state.value,
            files=plan.discovered_count,
        )
        return ImportDraft(path=path, title=title, service_id=service_id, plan=plan)

    def resolve_mismatch(self, draft: ImportDraft, user_input: str) -> ImportDraft:
        """
        Applique les numeros saisis par l'utilisateur au brouillon.

        Leve :
            ParseError : Si la saisie est invalide (le brouillon reste inchange)
        """
        return replace(draft, plan=self._reconciler.resolve_mismatch(draft.plan, user_input))

    async def save_import(self, draft: ImportDraft) -> ImportResult:
        """
        Enregistre la serie et ses episodes.

        Si une serie de meme titre existe deja, les episodes lui sont ajoutes.
        Une serie liee est ajoutee a la liste distante si elle n'y figure pas.

        Leve :
            ConstraintViolation : Si le service_id appartient a une autre serie
            ParseError : Si le plan attend encore des numeros d'episodes
        """
        if draft.plan.state is PlanState.AWAITING_NUMBERS:
            raise ParseError("Numeros d'episodes requis avant l'enregistrement")

        created = True
        try:
            local_id = self._shows.create_show(draft.title, draft.service_id)
        except ConstraintViolation as violation:
            try:
                local_id = self._shows.find_show_id_by_title(draft.title)
            except NotFound:
                raise violation from None
            created = False
            logger.info("Serie deja presente, ajout des episodes", title=draft.title)

        episodes = await self._reconciler.attach(draft.plan, local_id)
        if created and self._remote_enabled(draft.service_id):
            await self._service.init_show(draft.service_id)

        logger.info(
            "Importation enregistree",
            title=draft.title,
            local_id=local_id,
            episodes=len(episodes),
        )
        return ImportResult(local_id=local_id, created=created, episodes=episodes)

    async def add_episode(self, local_id: int, path: Path) -> PlannedEpisode:
        """
        Ajoute un fichier video apres le dernier episode de la serie.

        Leve :
            NotFound : Si la serie n'existe pas
            FileProbeError : Si path n'est pas un fichier video
        """
        show = self._shows.get_show(local_id)
        start_after = self._episodes.last_episode_number(local_id)
        plan = self._reconciler.single_episode_plan(path, start_after, show.service_id)
        episodes = await self._reconciler.attach(plan, local_id)
        logger.info("Episode ajoute", title=show.title, number=episodes[0].number)
        return episodes[0]

    async def set_progress(self, local_id: int, progress: int) -> int:
        """
        Fixe la progression, envoyee au service pour une serie liee.

        La valeur acceptee par le service est celle stockee localement.

        Retourne :
            La progression enregistree
        """
        show = self._shows.get_show(local_id)
        progress = max(progress, 0)
        if self._remote_enabled(show.service_id):
            progress = await self._service.set_remote_progress(show.service_id, progress)
        self._shows.set_progress(local_id, progress)
        return progress

    async def change_progress(self, local_id: int, delta: int) -> int:
        """Incremente ou decremente la progression (jamais sous 0)."""
        show = self._shows.get_show(local_id)
        return await self.set_progress(local_id, show.progress + delta)
