"""
Tests unitaires pour la configuration et la selection du service de suivi.

Tests couvrant :
- Valeurs par defaut et chemins derives de data_dir
- Variables d'environnement MEDIALIST_* et normalisation des enums
- Fichier TOML
- Erreurs de validation converties en ParseError
- Repli sur le service local sans client_id MyAnimeList
"""

from pathlib import Path

import pytest
from pydantic_settings import SettingsConfigDict

from medialist.config import Settings, load_settings
from medialist.container import _service_key
from medialist.core.entities.media import TitleSort
from medialist.core.errors import ParseError
from medialist.core.ports.tracking_service import ServiceType


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isole les tests des variables MEDIALIST_* et du .env de la machine."""
    for name in (
        "MEDIALIST_SERVICE",
        "MEDIALIST_TITLE_SORT",
        "MEDIALIST_DATA_DIR",
        "MEDIALIST_DATABASE_URL",
        "MEDIALIST_MAL_CLIENT_ID",
        "MEDIALIST_PRECISE_SCORE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestSettings:
    """Tests des parametres."""

    def test_paths_derive_from_data_dir(self, tmp_path: Path) -> None:
        settings = Settings(data_dir=tmp_path / "data")

        assert settings.resolved_database_url == f"sqlite:///{tmp_path / 'data' / 'database.db3'}"
        assert settings.tokens_file == tmp_path / "data" / "tokens"
        assert settings.cache_dir == tmp_path / "data" / "cache" / "api"

    def test_explicit_database_url_wins(self, tmp_path: Path) -> None:
        settings = Settings(data_dir=tmp_path, database_url="sqlite:///:memory:")
        assert settings.resolved_database_url == "sqlite:///:memory:"

    def test_home_is_expanded(self) -> None:
        settings = Settings(data_dir="~/medialist")
        assert "~" not in str(settings.data_dir)

    def test_environment_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Les enums acceptent les valeurs en majuscules."""
        monkeypatch.setenv("MEDIALIST_SERVICE", "LOCAL")
        monkeypatch.setenv("MEDIALIST_TITLE_SORT", "TITLE_DESC")
        monkeypatch.setenv("MEDIALIST_PRECISE_SCORE", "false")

        settings = load_settings()

        assert settings.service is ServiceType.LOCAL
        assert settings.title_sort is TitleSort.TITLE_DESC
        assert settings.precise_score is False

    def test_toml_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.toml"
        config_file.write_text('title_sort = "service_id_asc"\nautofill_title = false\n')

        class TomlSettings(Settings):
            model_config = SettingsConfigDict(**{**Settings.model_config, "toml_file": config_file})

        settings = TomlSettings()

        assert settings.title_sort is TitleSort.SERVICE_ID_ASC
        assert settings.autofill_title is False

    def test_invalid_value_raises_parse_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MEDIALIST_TITLE_SORT", "random")

        with pytest.raises(ParseError, match="title_sort"):
            load_settings()

    def test_mal_enabled_requires_client_id(self) -> None:
        assert Settings(service="mal", mal_client_id=None).mal_enabled is False
        assert Settings(service="mal", mal_client_id="abc").mal_enabled is True
        assert Settings(service="local", mal_client_id="abc").mal_enabled is False


class TestServiceSelection:
    """Tests du choix de la variante du service de suivi."""

    def test_mal_with_client_id(self) -> None:
        assert _service_key(Settings(service="mal", mal_client_id="abc")) == "mal"

    def test_mal_without_client_id_falls_back_to_local(self) -> None:
        assert _service_key(Settings(service="mal", mal_client_id=None)) == "local"

    def test_local(self) -> None:
        assert _service_key(Settings(service="local")) == "local"
