"""
Fixtures pytest partagees pour les tests medialist.

Ce module contient les fixtures communes utilisees dans les tests :
- Base SQLite temporaire et session SQLModel
- Repositories branches sur cette session
- Mocks des ports (service de suivi, prober)
- Settings de test avec chemins temporaires
- Dossier de serie avec fichiers video factices
"""

from pathlib import Path
from typing import Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlmodel import Session

from medialist.config import Settings
from medialist.core.ports.file_system import IVideoFileProber
from medialist.core.ports.tracking_service import ITrackingService, ServiceType
from medialist.infrastructure.persistence.database import create_db_engine, create_schema
from medialist.infrastructure.persistence.repositories import (
    SQLModelEpisodeRepository,
    SQLModelShowRepository,
)


@pytest.fixture
def engine(tmp_path: Path):
    """Engine SQLite sur un fichier temporaire, schema cree."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db3'}")
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine) -> Iterator[Session]:
    """Session SQLModel de test."""
    with Session(engine) as session:
        yield session


@pytest.fixture
def show_repo(session: Session) -> SQLModelShowRepository:
    return SQLModelShowRepository(session)


@pytest.fixture
def episode_repo(session: Session) -> SQLModelEpisodeRepository:
    return SQLModelEpisodeRepository(session)


@pytest.fixture
def mock_tracking_service() -> MagicMock:
    """
    Mock de ITrackingService (variante MAL, connecte).

    Les methodes async sont des AsyncMock ; les valeurs de retour doivent
    etre configurees dans chaque test.
    """
    mock = MagicMock(spec=ITrackingService)
    mock.service_type = ServiceType.MAL
    mock.is_authenticated.return_value = True
    mock.authorization_url.return_value = None
    mock.login = AsyncMock()
    mock.search_titles = AsyncMock(return_value=[])
    mock.get_title = AsyncMock(return_value="")
    mock.alternative_titles = AsyncMock(return_value=None)
    mock.episode_count = AsyncMock(return_value=None)
    mock.episode_metadata = AsyncMock(return_value=[])
    mock.user_entry = AsyncMock(return_value=None)
    mock.remote_progress = AsyncMock(return_value=None)
    mock.set_remote_progress = AsyncMock(side_effect=lambda service_id, progress: progress)
    mock.init_show = AsyncMock()
    mock.close = AsyncMock()
    return mock


@pytest.fixture
def mock_prober() -> MagicMock:
    """Mock de IVideoFileProber, sans fichier par defaut."""
    mock = MagicMock(spec=IVideoFileProber)
    mock.list_video_files.return_value = []
    mock.guess_title.return_value = ""
    mock.count_video_files.return_value = 0
    mock.is_video_file.return_value = True
    return mock


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings de test avec chemins temporaires.

    Les valeurs explicites priment sur l'environnement et les fichiers
    de configuration de la machine.
    """
    data_dir = tmp_path / "data"
    return Settings(
        data_dir=data_dir,
        database_url=f"sqlite:///{data_dir / 'database.db3'}",
        service="local",
        mal_client_id=None,
        title_sort="local_id_asc",
        update_progress_on_start=False,
        autofill_title=True,
        english_show_titles=False,
        precise_score=True,
        log_file=tmp_path / "logs" / "medialist.log",
    )


@pytest.fixture
def show_dir(tmp_path: Path) -> Path:
    """Dossier de serie contenant trois episodes et des fichiers annexes."""
    directory = tmp_path / "videos" / "Show Name"
    directory.mkdir(parents=True)
    for number in (1, 2, 3):
        (directory / f"Show Name - {number:02d} [Group].mkv").write_bytes(b"")
    (directory / "Show Name - 01 [Group].ass").write_text("sous-titres")
    (directory / "notes.txt").write_text("a lire")
    return directory
