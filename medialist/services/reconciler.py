"""
Service de rapprochement fichiers / episodes.

Transforme les fichiers video decouverts et le nombre d'episodes annonce par
le service de suivi en une liste numerotee d'episodes :

1. Nombres egaux, ou nombre distant inconnu : numerotation automatique
   des fichiers tries, a la suite du plus grand episode deja stocke.
2. Service en avance (plus d'episodes annonces que de fichiers) :
   l'utilisateur indique les numeros possedes ("8,10-12").
3. Local en avance (plus de fichiers que d'episodes annonces) : etat
   incoherent, aucun episode n'est rattache.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Optional

from loguru import logger

from medialist.core.entities.media import pack_extra_info
from medialist.core.errors import FileProbeError, ParseError, RemoteError
from medialist.core.ports.file_system import IVideoFileProber
from medialist.core.ports.repositories import IEpisodeRepository
from medialist.core.ports.tracking_service import (
    ITrackingService,
    ServiceEpisodeDetails,
    ServiceType,
)


class PlanState(Enum):
    """Etat d'un plan de rattachement."""

    AUTO_NUMBERED = "auto_numbered"
    AWAITING_NUMBERS = "awaiting_numbers"
    RESOLVED = "resolved"
    LOCAL_AHEAD = "local_ahead"


@dataclass(frozen=True)
class PlannedEpisode:
    """Fichier video associe a son numero d'episode."""

    number: int
    path: Path


@dataclass
class EpisodePlan:
    """
    Resultat du rapprochement pour une importation ou un ajout.

    Attributs :
        files : Fichiers video decouverts, tries
        service_id : Serie sur le service de suivi (0 = non liee)
        expected_count : Episodes annonces par le service (0 = inconnu ou remis a zero)
        state : Etat du plan
        episodes : Episodes numerotes (vide tant que des numeros sont attendus)
    """

    files: list[Path]
    service_id: int = 0
    expected_count: int = 0
    state: PlanState = PlanState.AUTO_NUMBERED
    episodes: list[PlannedEpisode] = field(default_factory=list)

    @property
    def discovered_count(self) -> int:
        return len(self.files)

    @property
    def is_ready(self) -> bool:
        """Le plan peut etre rattache a une serie."""
        return self.state in (PlanState.AUTO_NUMBERED, PlanState.RESOLVED)


def _parse_number(value: str, token: str) -> int:
    value = value.strip()
    if not value.isdecimal():
        raise ParseError(f"Numero d'episode invalide: '{token.strip()}'")
    number = int(value)
    if number < 1:
        raise ParseError(f"Les episodes commencent a 1: '{token.strip()}'")
    return number


def parse_episode_numbers(text: str, max_count: Optional[int] = None) -> list[int]:
    """
    Analyse une liste de numeros et d'intervalles inclusifs.

    Exemple : "8,10-12" -> [8, 10, 11, 12]. Les doublons sont supprimes et
    le resultat est trie ; les elements vides sont ignores.

    Args :
        text : Saisie de l'utilisateur
        max_count : Nombre de numeros attendus ; un intervalle plus large est
            refuse avant d'etre developpe

    Leve :
        ParseError : Si un element n'est pas un nombre ou un intervalle valide
    """
    numbers: set[int] = set()
    for token in text.split(","):
        if not token.strip():
            continue
        if "-" in token:
            low, _, high = token.partition("-")
            start = _parse_number(low, token)
            end = _parse_number(high, token)
            if start > end:
                raise ParseError(f"Intervalle inverse: '{token.strip()}'")
            if max_count is not None and end - start + 1 > max_count:
                raise ParseError(
                    f"Intervalle trop large pour {max_count} fichier(s): '{token.strip()}'"
                )
            numbers.update(range(start, end + 1))
        else:
            numbers.add(_parse_number(token, token))
    return sorted(numbers)


def _number_files(files: list[Path], start_after: int) -> list[PlannedEpisode]:
    return [
        PlannedEpisode(number=start_after + index, path=path)
        for index, path in enumerate(files, start=1)
    ]


class EpisodeReconciler:
    """
    Construit, resout et rattache les plans d'episodes.

    Exemple :
        plan = await reconciler.plan(Path("/videos/Show"), service_id=52991)
        if plan.state is PlanState.AWAITING_NUMBERS:
            plan = reconciler.resolve_mismatch(plan, "1,5,9")
        attached = await reconciler.attach(plan, show_id)
    """

    def __init__(
        self,
        tracking_service: ITrackingService,
        prober: IVideoFileProber,
        episode_repository: IEpisodeRepository,
    ) -> None:
        self._service = tracking_service
        self._prober = prober
        self._episodes = episode_repository

    def _uses_remote(self, service_id: int) -> bool:
        return service_id != 0 and self._service.service_type is not ServiceType.LOCAL

    async def _expected_count(self, service_id: int) -> Optional[int]:
        """Nombre d'episodes distant, None si inconnu (0 compris)."""
        if not self._uses_remote(service_id):
            return None
        count = await self._service.episode_count(service_id)
        return count or None

    async def plan(self, path: Path, service_id: int = 0, start_after: int = 0) -> EpisodePlan:
        """
        Construit le plan de rattachement des fichiers sous path.

        Args :
            path : Dossier de la serie, ou fichier video unique
            service_id : Serie sur le service de suivi (0 = non liee)
            start_after : Plus grand numero deja stocke pour la serie

        Leve :
            FileProbeError : Si path est illisible
            RemoteError : Si le nombre d'episodes distant ne peut etre obtenu
        """
        files = self._prober.list_video_files(path)
        if not files:
            logger.debug("Aucun fichier video", path=str(path))
            return EpisodePlan(files=[], service_id=service_id)

        expected = await self._expected_count(service_id)
        discovered = len(files)

        if expected is None or expected == discovered:
            logger.debug(
                "Numerotation automatique",
                discovered=discovered,
                expected=expected,
                start_after=start_after,
            )
            return EpisodePlan(
                files=files,
                service_id=service_id,
                expected_count=expected or 0,
                state=PlanState.AUTO_NUMBERED,
                episodes=_number_files(files, start_after),
            )

        if expected > discovered:
            logger.debug("Numeros d'episodes requis", discovered=discovered, expected=expected)
            return EpisodePlan(
                files=files,
                service_id=service_id,
                expected_count=expected,
                state=PlanState.AWAITING_NUMBERS,
            )

        logger.debug("Plus de fichiers que d'episodes annonces", discovered=discovered, expected=expected)
        return EpisodePlan(
            files=files,
            service_id=service_id,
            expected_count=0,
            state=PlanState.LOCAL_AHEAD,
        )

    def single_episode_plan(
        self, path: Path, start_after: int, service_id: int = 0
    ) -> EpisodePlan:
        """
        Plan d'un fichier video unique, numerote apres start_after.

        Leve :
            FileProbeError : Si path n'est pas un fichier video
        """
        if not self._prober.is_video_file(path):
            raise FileProbeError(f"Pas un fichier video: {path}")
        return EpisodePlan(
            files=[path],
            service_id=service_id,
            state=PlanState.AUTO_NUMBERED,
            episodes=_number_files([path], start_after),
        )

    def resolve_mismatch(self, plan: EpisodePlan, user_input: str) -> EpisodePlan:
        """
        Associe les numeros saisis aux fichiers tries, dans l'ordre.

        Le plan d'origine n'est pas modifie : en cas d'erreur, l'appelant
        peut redemander une saisie.

        Leve :
            ParseError : Saisie mal formee, nombre de numeros different du
                nombre de fichiers, ou plan sans numeros attendus
        """
        if plan.state not in (PlanState.AWAITING_NUMBERS, PlanState.RESOLVED):
            raise ParseError(f"Aucun numero attendu pour ce plan ({plan.state.value})")
        numbers = parse_episode_numbers(user_input, max_count=plan.discovered_count)
        if len(numbers) != plan.discovered_count:
            raise ParseError(
                f"{len(numbers)} numero(s) saisi(s) pour {plan.discovered_count} fichier(s)"
            )
        return replace(
            plan,
            state=PlanState.RESOLVED,
            episodes=[
                PlannedEpisode(number=number, path=path)
                for number, path in zip(numbers, plan.files)
            ],
        )

    async def episode_details(self, service_id: int) -> dict[int, ServiceEpisodeDetails]:
        """
        Metadonnees distantes indexees par numero d'episode.

        Les metadonnees sont decoratives : un echec distant est journalise
        et donne un dictionnaire vide.
        """
        if not self._uses_remote(service_id):
            return {}
        try:
            details = await self._service.episode_metadata(service_id)
        except RemoteError as e:
            logger.warning(
                "Metadonnees d'episodes indisponibles", service_id=service_id, error=str(e)
            )
            return {}
        return {episode.number: episode for episode in details if episode.number is not None}

    async def attach(self, plan: EpisodePlan, show_id: int) -> list[PlannedEpisode]:
        """
        Enregistre les episodes du plan pour la serie show_id.

        Retourne :
            Les episodes rattaches (aucun pour un plan "local en avance")

        Leve :
            ParseError : Si le plan attend encore des numeros
            StorageError, ConstraintViolation : En cas d'echec d'ecriture
        """
        if plan.state is PlanState.LOCAL_AHEAD:
            logger.info("Rattachement annule: plus de fichiers que d'episodes annonces")
            return []
        if not plan.is_ready:
            raise ParseError("Numeros d'episodes requis avant l'enregistrement")
        if not plan.episodes:
            return []

        details = await self.episode_details(plan.service_id)
        for episode in plan.episodes:
            metadata = details.get(episode.number, ServiceEpisodeDetails())
            self._episodes.upsert_episode(
                show_id,
                episode.number,
                episode.path,
                title=metadata.title or "",
                extra_info=pack_extra_info(bool(metadata.recap), bool(metadata.filler)),
                score=metadata.score,
                duration=metadata.duration,
                aired=metadata.aired,
            )
        logger.debug("Episodes rattaches", show_id=show_id, count=len(plan.episodes))
        return list(plan.episodes)
