"""
Adaptateurs des services de suivi.

Exports :
- MALService : Service MyAnimeList (OAuth2 PKCE, API v2, Jikan)
- LocalService : Service local sans reseau
- APICache : Cache disque des reponses distantes
- RateLimitError, request_with_retry : Relance sur HTTP 429
"""

from medialist.adapters.api.cache import APICache
from medialist.adapters.api.local_service import LocalService
from medialist.adapters.api.mal_service import MALService
from medialist.adapters.api.retry import RateLimitError, request_with_retry

__all__ = [
    "APICache",
    "LocalService",
    "MALService",
    "RateLimitError",
    "request_with_retry",
]
