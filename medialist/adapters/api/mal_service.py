"""
Service de suivi MyAnimeList.

Implemente ITrackingService avec :
- OAuth2 PKCE (challenge "plain") sur myanimelist.net/v1/oauth2
- API v2 (api.myanimelist.net/v2) pour la recherche, les details et la
  liste de l'utilisateur
- API Jikan v4 (api.jikan.moe) pour les metadonnees des episodes, que
  l'API officielle ne fournit pas

Les jetons sont conserves en JSON dans <data_dir>/tokens et rafraichis
automatiquement a expiration.

Reference API : https://myanimelist.net/apiconfig/references/api/v2
"""

import json
import secrets
import time
from datetime import date
from pathlib import Path
from typing import Any, Optional

import httpx
from loguru import logger

from medialist.adapters.api.cache import APICache
from medialist.adapters.api.retry import request_with_retry
from medialist.core.errors import AuthError, RemoteError, StorageError
from medialist.core.ports.tracking_service import (
    AlternativeTitles,
    EntryStatus,
    ITrackingService,
    ServiceEpisodeDetails,
    ServiceTitle,
    ServiceType,
    ServiceUserEntry,
)

# MAL refuse les recherches de moins de 3 caracteres
MIN_SEARCH_LENGTH = 3
SEARCH_PADDING = "."
SEARCH_LIMIT = 20

# Marge avant expiration pour rafraichir le jeton d'acces (secondes)
TOKEN_EXPIRY_MARGIN = 60


class MALService(ITrackingService):
    """
    Service de suivi MyAnimeList.

    Exemple :
        cache = APICache(cache_dir=settings.cache_dir)
        service = MALService(client_id="...", tokens_file=settings.tokens_file, cache=cache)
        if not service.is_authenticated():
            print(service.authorization_url())
            await service.login(input("URL de redirection: "))
        results = await service.search_titles("Frieren")
        await service.close()
    """

    AUTH_URL = "https://myanimelist.net/v1/oauth2"
    API_URL = "https://api.myanimelist.net/v2"
    JIKAN_URL = "https://api.jikan.moe/v4"

    def __init__(
        self,
        client_id: str,
        tokens_file: Path,
        cache: APICache,
        redirect_uri: str = "http://localhost:2525",
        precise_score: bool = True,
    ) -> None:
        """
        Args :
            client_id : Identifiant de l'application MAL
            tokens_file : Fichier JSON des jetons OAuth
            cache : Cache des recherches et des metadonnees
            redirect_uri : URL de redirection declaree pour l'application
            precise_score : Conserver les notes d'episode en decimal
        """
        self._client_id = client_id
        self._tokens_file = Path(tokens_file)
        self._cache = cache
        self._redirect_uri = redirect_uri
        self._precise_score = precise_score
        self._tokens: Optional[dict[str, Any]] = self._load_tokens()
        self._code_verifier: Optional[str] = None
        self._state: Optional[str] = None
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def service_type(self) -> ServiceType:
        return ServiceType.MAL

    # ------------------------------------------------------------------
    # Jetons
    # ------------------------------------------------------------------

    def _load_tokens(self) -> Optional[dict[str, Any]]:
        if not self._tokens_file.exists():
            return None
        try:
            tokens = json.loads(self._tokens_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Fichier de jetons illisible, connexion requise", error=str(e))
            return None
        if not isinstance(tokens, dict) or "access_token" not in tokens:
            return None
        return tokens

    def _save_tokens(self, payload: dict[str, Any]) -> None:
        expires_in = payload.get("expires_in")
        tokens = {
            "access_token": payload["access_token"],
            "refresh_token": payload.get("refresh_token"),
            "expires_at": time.time() + int(expires_in) if expires_in is not None else None,
        }
        try:
            self._tokens_file.parent.mkdir(parents=True, exist_ok=True)
            self._tokens_file.write_text(json.dumps(tokens), encoding="utf-8")
            self._tokens_file.chmod(0o600)
        except OSError as e:
            raise StorageError(f"Ecriture des jetons impossible: {e}") from e
        self._tokens = tokens

    def _token_expired(self) -> bool:
        expires_at = self._tokens.get("expires_at") if self._tokens else None
        if expires_at is None:
            return False
        return time.time() >= float(expires_at) - TOKEN_EXPIRY_MARGIN

    # ------------------------------------------------------------------
    # Authentification
    # ------------------------------------------------------------------

    def is_authenticated(self) -> bool:
        """Connecte si un jeton d'acces valide ou un jeton de rafraichissement existe."""
        if self._tokens is None:
            return False
        return not self._token_expired() or bool(self._tokens.get("refresh_token"))

    def authorization_url(self) -> Optional[str]:
        """
        Construit l'URL d'autorisation PKCE.

        Un nouveau code_verifier est genere a chaque appel ; il doit etre
        utilise par le login() suivant.
        """
        if self.is_authenticated():
            return None
        # 43 a 128 caracteres pour un code_verifier PKCE
        self._code_verifier = secrets.token_urlsafe(96)[:128]
        self._state = secrets.token_urlsafe(16)
        params = {
            "response_type": "code",
            "client_id": self._client_id,
            "code_challenge": self._code_verifier,
            "code_challenge_method": "plain",
            "state": self._state,
            "redirect_uri": self._redirect_uri,
        }
        return str(httpx.URL(f"{self.AUTH_URL}/authorize", params=params))

    def _extract_code(self, callback: str) -> str:
        callback = callback.strip()
        if "code=" not in callback:
            return callback
        try:
            if "://" in callback:
                query = httpx.URL(callback).params
            else:
                query = httpx.QueryParams(callback.split("?", 1)[-1])
        except httpx.InvalidURL as e:
            raise AuthError(f"URL de redirection invalide: {e}") from e
        state = query.get("state")
        if state is not None and self._state is not None and state != self._state:
            raise AuthError("Etat OAuth inattendu, relancer la connexion")
        code = query.get("code")
        if not code:
            raise AuthError("Code d'autorisation absent de l'URL")
        return code

    async def login(self, callback: str) -> None:
        """
        Echange le code d'autorisation contre des jetons.

        Args :
            callback : Code recu, ou URL de redirection complete

        Leve :
            AuthError : Si aucun code_verifier n'a ete genere ou si MAL refuse le code
        """
        if self._code_verifier is None:
            raise AuthError("Demander d'abord l'URL d'autorisation")
        code = self._extract_code(callback)
        data = {
            "client_id": self._client_id,
            "grant_type": "authorization_code",
            "code": code,
            "code_verifier": self._code_verifier,
            "redirect_uri": self._redirect_uri,
        }
        payload = await self._token_request(data)
        self._save_tokens(payload)
        self._code_verifier = None
        self._state = None
        logger.info("Connecte a MyAnimeList")

    async def _refresh_token(self) -> None:
        refresh_token = self._tokens.get("refresh_token") if self._tokens else None
        if not refresh_token:
            raise AuthError("Session MyAnimeList expiree, se reconnecter")
        data = {
            "client_id": self._client_id,
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        payload = await self._token_request(data)
        self._save_tokens(payload)
        logger.debug("Jeton MyAnimeList rafraichi")

    async def _token_request(self, data: dict[str, str]) -> dict[str, Any]:
        client = await self._get_client()
        try:
            response = await client.post(f"{self.AUTH_URL}/token", data=data)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise AuthError(
                f"MyAnimeList a refuse l'authentification ({e.response.status_code})"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise RemoteError(f"Authentification MyAnimeList impossible: {e}") from e
        if "access_token" not in payload:
            raise AuthError("Reponse d'authentification MyAnimeList sans jeton")
        return payload

    async def _ensure_token(self) -> str:
        if self._tokens is None:
            raise AuthError("Non connecte a MyAnimeList")
        if self._token_expired():
            await self._refresh_token()
        return self._tokens["access_token"]

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    async def _get_client(self) -> httpx.AsyncClient:
        """Client HTTP unique (connection pooling), cree a la demande."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(30.0, connect=10.0))
        return self._client

    async def _request(self, method: str, url: str, auth: bool = True, **kwargs) -> Any:
        """
        Appel HTTP traduit dans la taxonomie du domaine.

        Leve :
            AuthError : Si le jeton est absent ou refuse (401)
            RateLimitError : Si MAL limite encore apres les relances
            RemoteError : Pour toute autre erreur reseau ou HTTP
        """
        headers = kwargs.pop("headers", {})
        if auth:
            headers["Authorization"] = f"Bearer {await self._ensure_token()}"
        client = await self._get_client()
        try:
            response = await request_with_retry(client, method, url, headers=headers, **kwargs)
            return response.json()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 401:
                raise AuthError("MyAnimeList a refuse le jeton d'acces") from e
            raise RemoteError(
                f"{method} {url}: reponse {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise RemoteError(f"{method} {url}: {e}") from e

    async def _anime_details(self, service_id: int, fields: str) -> dict[str, Any]:
        return await self._request(
            "GET", f"{self.API_URL}/anime/{service_id}", params={"fields": fields}
        )

    async def _update_status(self, service_id: int, update: dict[str, Any]) -> dict[str, Any]:
        return await self._request(
            "PATCH", f"{self.API_URL}/anime/{service_id}/my_list_status", data=update
        )

    # ------------------------------------------------------------------
    # Lecture
    # ------------------------------------------------------------------

    async def search_titles(self, text: str) -> list[ServiceTitle]:
        """
        Recherche des series par titre (20 resultats au plus).

        Les resultats sont caches 24 heures.
        """
        query = text.ljust(MIN_SEARCH_LENGTH, SEARCH_PADDING)
        cache_key = APICache.key("mal", "search", query)
        cached = await self._cache.get(cache_key)
        if cached is not None:
            return cached

        data = await self._request(
            "GET", f"{self.API_URL}/anime", params={"q": query, "limit": SEARCH_LIMIT}
        )
        results = [
            ServiceTitle(service_id=entry["node"]["id"], title=entry["node"]["title"])
            for entry in data.get("data", [])
        ]
        await self._cache.set_search(cache_key, results)
        return results

    async def get_title(self, service_id: int) -> str:
        cache_key = APICache.key("mal", "title", service_id)
        cached = await self._cache.get(cache_key)
        if cached is not None:
            return cached
        data = await self._anime_details(service_id, "title")
        title = data["title"]
        await self._cache.set_details(cache_key, title)
        return title

    async def alternative_titles(self, service_id: int) -> Optional[AlternativeTitles]:
        data = await self._anime_details(service_id, "alternative_titles")
        titles = data.get("alternative_titles")
        if titles is None:
            return None
        return AlternativeTitles(
            synonyms=tuple(titles.get("synonyms") or ()),
            languages={
                language: title
                for language, title in titles.items()
                if language != "synonyms" and title
            },
        )

    async def episode_count(self, service_id: int) -> Optional[int]:
        """Nombre d'episodes ; MAL renvoie 0 pour une serie en cours de diffusion."""
        data = await self._anime_details(service_id, "num_episodes")
        return data.get("num_episodes")

    async def user_entry(self, service_id: int) -> Optional[ServiceUserEntry]:
        data = await self._anime_details(service_id, "my_list_status")
        status = data.get("my_list_status")
        if status is None:
            return None
        return ServiceUserEntry(
            status=EntryStatus.parse(status.get("status")),
            progress=status.get("num_episodes_watched"),
            score=status.get("score"),
            is_rewatching=status.get("is_rewatching"),
            rewatch_count=status.get("num_times_rewatched"),
            updated_at=status.get("updated_at"),
            start_date=status.get("start_date"),
            finish_date=status.get("finish_date"),
            comments=status.get("comments"),
        )

    async def episode_metadata(self, service_id: int) -> list[ServiceEpisodeDetails]:
        """
        Metadonnees de tous les episodes via Jikan (pagine).

        Les pages brutes sont cachees 7 jours.
        """
        cache_key = APICache.key("jikan", "episodes", service_id)
        raw_episodes = await self._cache.get(cache_key)
        if raw_episodes is None:
            raw_episodes = []
            page = 1
            while True:
                data = await self._request(
                    "GET",
                    f"{self.JIKAN_URL}/anime/{service_id}/episodes",
                    auth=False,
                    params={"page": page},
                )
                raw_episodes.extend(data.get("data", []))
                if not data.get("pagination", {}).get("has_next_page"):
                    break
                page += 1
            await self._cache.set_details(cache_key, raw_episodes)

        return [self._to_episode_details(episode) for episode in raw_episodes]

    def _to_episode_details(self, episode: dict[str, Any]) -> ServiceEpisodeDetails:
        score = episode.get("score")
        if score is not None and not self._precise_score:
            score = float(round(score))
        return ServiceEpisodeDetails(
            number=episode.get("mal_id"),
            title=episode.get("title"),
            title_japanese=episode.get("title_japanese"),
            title_romanji=episode.get("title_romanji"),
            duration=episode.get("duration"),
            aired=episode.get("aired"),
            score=score,
            filler=episode.get("filler"),
            recap=episode.get("recap"),
        )

    # ------------------------------------------------------------------
    # Ecriture
    # ------------------------------------------------------------------

    async def set_remote_progress(self, service_id: int, progress: int) -> int:
        """
        Met a jour la progression sur la liste de l'utilisateur.

        Une progression nulle remet la serie en "plan_to_watch" ; le premier
        episode fixe la date de debut ; atteindre le nombre d'episodes passe
        la serie en "completed" avec une date de fin.

        Retourne :
            La progression acceptee par MAL (bornee au nombre d'episodes)
        """
        update: dict[str, Any] = {"num_watched_episodes": progress}
        if progress == 0:
            update["status"] = EntryStatus.PLAN_TO_WATCH.value
            update["start_date"] = ""
        else:
            update["status"] = EntryStatus.WATCHING.value
        updated = await self._update_status(service_id, update)

        today = date.today().isoformat()
        if updated.get("start_date") is None and progress == 1:
            await self._update_status(service_id, {"start_date": today})

        episode_count = await self.episode_count(service_id)
        accepted = updated.get("num_episodes_watched", progress)
        if episode_count and accepted >= episode_count:
            completion = {"status": EntryStatus.COMPLETED.value}
            if updated.get("finish_date") is None:
                completion["finish_date"] = today
            await self._update_status(service_id, completion)

        logger.debug(
            "Progression MyAnimeList mise a jour",
            service_id=service_id,
            requested=progress,
            accepted=accepted,
        )
        return accepted

    async def init_show(self, service_id: int) -> None:
        """Ajoute la serie en "plan_to_watch" si elle n'est pas sur la liste."""
        if await self.user_entry(service_id) is None:
            await self._update_status(
                service_id, {"status": EntryStatus.PLAN_TO_WATCH.value}
            )

    async def close(self) -> None:
        """Ferme le client HTTP et le cache disque."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        self._cache.close()
