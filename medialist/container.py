"""
Container d'injection de dependances via dependency-injector.

Assemble la configuration, le stockage SQLite, le prober de fichiers, le
service de suivi et les services applicatifs pour la ligne de commande.
"""

from dependency_injector import containers, providers
from loguru import logger
from sqlmodel import Session

from medialist.adapters.api.cache import APICache
from medialist.adapters.api.local_service import LocalService
from medialist.adapters.api.mal_service import MALService
from medialist.adapters.file_system import VideoFileProber
from medialist.config import Settings, load_settings
from medialist.core.ports.tracking_service import ServiceType
from medialist.infrastructure.persistence.database import init_db
from medialist.infrastructure.persistence.repositories import (
    SQLModelEpisodeRepository,
    SQLModelShowRepository,
)
from medialist.services.library import LibraryService
from medialist.services.reconciler import EpisodeReconciler
from medialist.services.sync import SyncService


def _service_key(settings: Settings) -> str:
    """Variante du service de suivi ; MAL sans client_id retombe sur le service local."""
    if settings.service is ServiceType.MAL and not settings.mal_enabled:
        logger.debug("MEDIALIST_MAL_CLIENT_ID absent, service local utilise")
        return ServiceType.LOCAL.value
    return settings.service.value


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        container.database.init()  # Cree le schema une fois
        library = container.library_service()
        report = await container.sync_service().run_sync_pass()
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(load_settings)

    # Database - Resource pour initialisation unique (retourne l'engine)
    database = providers.Resource(
        init_db,
        database_url=config.provided.resolved_database_url,
    )

    # Session unique : un seul ecrivain par processus
    session = providers.Singleton(Session, database)

    # Repositories
    show_repository = providers.Factory(SQLModelShowRepository, session=session)
    episode_repository = providers.Factory(SQLModelEpisodeRepository, session=session)

    # Adapters
    prober = providers.Singleton(VideoFileProber)

    # Cache API - Singleton partage, dans data_dir
    api_cache = providers.Singleton(APICache, cache_dir=config.provided.cache_dir)

    # Service de suivi selectionne par la configuration
    tracking_service = providers.Selector(
        providers.Callable(_service_key, config),
        mal=providers.Singleton(
            MALService,
            client_id=config.provided.mal_client_id,
            tokens_file=config.provided.tokens_file,
            cache=api_cache,
            redirect_uri=config.provided.mal_redirect_uri,
            precise_score=config.provided.precise_score,
        ),
        local=providers.Singleton(LocalService),
    )

    # Services applicatifs
    reconciler = providers.Factory(
        EpisodeReconciler,
        tracking_service=tracking_service,
        prober=prober,
        episode_repository=episode_repository,
    )
    sync_service = providers.Factory(
        SyncService,
        show_repository=show_repository,
        tracking_service=tracking_service,
    )
    library_service = providers.Factory(
        LibraryService,
        show_repository=show_repository,
        episode_repository=episode_repository,
        prober=prober,
        reconciler=reconciler,
        tracking_service=tracking_service,
        settings=config,
    )
