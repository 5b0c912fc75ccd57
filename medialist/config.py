"""
Configuration de l'application via pydantic-settings.

La configuration est chargee depuis les variables d'environnement avec le prefixe
MEDIALIST_, un fichier .env optionnel et un fichier TOML optionnel
(~/.config/medialist/settings.toml, surchargeable via MEDIALIST_CONFIG_FILE).

Priorite : arguments explicites > environnement > .env > TOML > defauts.
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from medialist.core.entities.media import TitleSort
from medialist.core.errors import ParseError
from medialist.core.ports.tracking_service import ServiceType

_DEFAULT_CONFIG_FILE = Path("~/.config/medialist/settings.toml").expanduser()
_CONFIG_FILE = Path(os.environ.get("MEDIALIST_CONFIG_FILE", _DEFAULT_CONFIG_FILE)).expanduser()


class Settings(BaseSettings):
    """Parametres de l'application avec support des variables d'environnement.

    Tous les parametres peuvent etre surcharges via des variables d'environnement
    avec le prefixe MEDIALIST_.
    Exemple : MEDIALIST_SERVICE=local

    Les chemins sont automatiquement etendus (~ -> repertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="MEDIALIST_",
        env_file=".env",
        env_file_encoding="utf-8",
        toml_file=_CONFIG_FILE,
        case_sensitive=False,
        extra="ignore",
    )

    # Donnees locales (base, jetons, cache API)
    data_dir: Path = Field(default=Path("~/.local/share/medialist"))
    database_url: Optional[str] = Field(default=None)

    # Service de suivi
    service: ServiceType = Field(default=ServiceType.MAL)
    mal_client_id: Optional[str] = Field(default=None)
    mal_redirect_uri: str = Field(default="http://localhost:2525")

    # Comportement
    title_sort: TitleSort = Field(default=TitleSort.LOCAL_ID_ASC)
    update_progress_on_start: bool = Field(default=False)
    autofill_title: bool = Field(default=True)
    english_show_titles: bool = Field(default=False)
    precise_score: bool = Field(default=True)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de retention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("~/.local/share/medialist/logs/medialist.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5, ge=0)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Ajoute le fichier TOML apres les sources d'environnement."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
        )

    @field_validator("data_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Etend ~ vers le repertoire home dans les chemins."""
        return Path(v).expanduser()

    @field_validator("service", "title_sort", mode="before")
    @classmethod
    def normalize_enum(cls, v):
        """Accepte les valeurs en majuscules (ex: "MAL", "LOCAL_ID_ASC")."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def resolved_database_url(self) -> str:
        """URL de la base, dans data_dir si non configuree."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.data_dir / 'database.db3'}"

    @property
    def tokens_file(self) -> Path:
        """Fichier des jetons OAuth du service de suivi."""
        return self.data_dir / "tokens"

    @property
    def cache_dir(self) -> Path:
        """Repertoire du cache des appels API."""
        return self.data_dir / "cache" / "api"

    @property
    def mal_enabled(self) -> bool:
        """Verifie si le service MyAnimeList est utilisable."""
        return self.service == ServiceType.MAL and self.mal_client_id is not None


def load_settings(**overrides) -> Settings:
    """
    Charge les parametres en convertissant les erreurs de validation.

    Leve :
        ParseError : Si une valeur de configuration est invalide
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in error["loc"]) for error in e.errors()
        )
        raise ParseError(f"Configuration invalide ({fields}): {e}") from e
