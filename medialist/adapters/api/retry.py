"""
Relance des requetes limitees en debit (HTTP 429).

La relance est une politique de l'adaptateur reseau : le noyau n'en fait
aucune. Seules les reponses 429 sont relancees, avec un backoff exponentiel
et du jitter ; toute autre erreur HTTP remonte immediatement.

Usage :
    response = await request_with_retry(client, "GET", "/anime", params=...)
"""

from typing import Optional

import httpx
from loguru import logger
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from medialist.core.errors import RemoteError


class RateLimitError(RemoteError):
    """
    Le service a repondu 429 Too Many Requests.

    Attributs :
        retry_after : Secondes a attendre (header Retry-After), ou None
    """

    def __init__(self, retry_after: Optional[int] = None) -> None:
        self.retry_after = retry_after
        super().__init__(f"Limite de requetes atteinte. Reessayer dans: {retry_after}s")


def _log_retry(retry_state: RetryCallState) -> None:
    logger.debug(
        "Limite de requetes atteinte, nouvelle tentative",
        attempt=retry_state.attempt_number,
    )


def with_retry(max_attempts: int = 5, max_wait: int = 60):
    """
    Decorateur relancant une coroutine sur RateLimitError.

    Args :
        max_attempts : Nombre maximum de tentatives
        max_wait : Delai maximum entre deux tentatives, en secondes
    """
    return retry(
        retry=retry_if_exception_type(RateLimitError),
        wait=wait_random_exponential(multiplier=1, min=1, max=max_wait),
        stop=stop_after_attempt(max_attempts),
        before_sleep=_log_retry,
        reraise=True,
    )


def _parse_retry_after(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_attempts: int = 5,
    **kwargs,
) -> httpx.Response:
    """
    Execute une requete HTTP, relancee sur 429.

    Retourne :
        La reponse en cas de succes (2xx)

    Leve :
        RateLimitError : Si 429 apres epuisement des tentatives
        httpx.HTTPStatusError : Pour les autres statuts d'erreur
        httpx.TransportError : Si le service est injoignable
    """

    @with_retry(max_attempts=max_attempts)
    async def _do_request() -> httpx.Response:
        response = await client.request(method, url, **kwargs)
        if response.status_code == 429:
            raise RateLimitError(_parse_retry_after(response.headers.get("Retry-After")))
        response.raise_for_status()
        return response

    return await _do_request()
