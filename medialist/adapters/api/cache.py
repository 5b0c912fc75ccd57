"""
Cache disque des reponses du service de suivi.

Le cache utilise diskcache pour conserver les reponses entre deux lancements
de la commande : une recherche repetee ou la liste d'episodes d'une serie
deja importee ne coutent pas de nouvel appel reseau.

TTL :
- Recherches (SEARCH_TTL) : 24 heures
- Details et episodes (DETAILS_TTL) : 7 jours

La progression de l'utilisateur n'est jamais mise en cache.
"""

import asyncio
from functools import partial
from pathlib import Path
from typing import Any, Optional, Union

from diskcache import Cache


class APICache:
    """
    Cache asynchrone avec TTL pour les appels au service de suivi.

    Les operations diskcache sont bloquantes ; elles sont executees via
    run_in_executor pour ne pas bloquer la boucle asyncio.

    Exemple :
        cache = APICache(cache_dir=settings.cache_dir)
        key = APICache.key("mal", "search", "frieren")
        await cache.set_search(key, results)
        data = await cache.get(key)
    """

    SEARCH_TTL = 24 * 60 * 60  # 24 heures
    DETAILS_TTL = 7 * 24 * 60 * 60  # 7 jours

    def __init__(self, cache_dir: Union[str, Path] = ".cache/api") -> None:
        """
        Args :
            cache_dir : Repertoire du cache (cree si inexistant)
        """
        self._cache = Cache(str(cache_dir))

    @staticmethod
    def key(*parts: Any) -> str:
        """Construit une cle "service:categorie:valeur" normalisee."""
        return ":".join(str(part).strip().lower() for part in parts)

    async def get(self, key: str) -> Optional[Any]:
        """Valeur stockee, ou None si absente ou expiree."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._cache.get, key)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Stocke une valeur (picklable) pour ttl secondes."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None, partial(self._cache.set, key, value, expire=ttl)
        )

    async def set_search(self, key: str, value: Any) -> None:
        """Stocke un resultat de recherche (TTL de 24h)."""
        await self.set(key, value, self.SEARCH_TTL)

    async def set_details(self, key: str, value: Any) -> None:
        """Stocke des details de serie ou d'episodes (TTL de 7 jours)."""
        await self.set(key, value, self.DETAILS_TTL)

    def close(self) -> None:
        """Ferme la connexion au cache."""
        self._cache.close()
