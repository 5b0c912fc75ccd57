"""
Configuration de la base de donnees SQLite pour medialist.

Ce module fournit :
- Engine SQLite avec les cles etrangeres activees
- Creation paresseuse du schema

La base de donnees est configuree via MEDIALIST_DATABASE_URL
(defaut: <data_dir>/database.db3).
"""

from pathlib import Path
from typing import Optional

from loguru import logger
from sqlalchemy import Engine, event
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlmodel import SQLModel, create_engine

from medialist.core.errors import StorageError

# Engine global - initialise lors du premier appel a get_engine()
_engine: Optional[Engine] = None


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite n'applique les cles etrangeres qu'apres ce PRAGMA."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str) -> Engine:
    """
    Cree un engine pour l'URL donnee.

    Cree le repertoire parent si l'URL designe un fichier SQLite.

    Leve :
        StorageError : Si la base ne peut pas etre ouverte
    """
    if database_url.startswith("sqlite:///") and not database_url.startswith("sqlite:///:memory:"):
        db_path = Path(database_url.replace("sqlite:///", ""))
        try:
            db_path.parent.mkdir(exist_ok=True, parents=True)
        except OSError as e:
            raise StorageError(f"Repertoire de la base inaccessible: {e}") from e

    try:
        engine = create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
        )
    except SQLAlchemyError as e:
        raise StorageError(f"Ouverture de la base impossible: {e}") from e
    event.listen(engine, "connect", _enable_foreign_keys)
    return engine


def create_schema(engine: Engine) -> None:
    """
    Cree les tables si elles n'existent pas.

    Une erreur "already exists" est ignoree ; toute autre erreur de
    creation est fatale.

    Leve :
        StorageError : Si le schema ne peut pas etre cree
    """
    # Import des modeles pour enregistrer leurs metadonnees
    from medialist.infrastructure.persistence import models  # noqa: F401

    try:
        SQLModel.metadata.create_all(engine)
    except OperationalError as e:
        if "already exists" in str(e):
            logger.debug("Tables deja presentes, creation ignoree")
            return
        raise StorageError(f"Creation des tables impossible: {e}") from e
    except SQLAlchemyError as e:
        raise StorageError(f"Creation des tables impossible: {e}") from e


def get_engine(database_url: Optional[str] = None) -> Engine:
    """
    Retourne l'engine global, en le creant si necessaire.

    Sans URL explicite, utilise la configuration de l'application.
    """
    global _engine
    if _engine is None:
        if database_url is None:
            from medialist.config import load_settings

            database_url = load_settings().resolved_database_url
        _engine = create_db_engine(database_url)
    return _engine


def init_db(database_url: Optional[str] = None) -> Engine:
    """
    Initialise la base de donnees en creant toutes les tables.

    Doit etre appelee une fois au demarrage de l'application.
    """
    engine = get_engine(database_url)
    create_schema(engine)
    logger.debug("Base de donnees prete", url=str(engine.url))
    return engine


def reset_engine() -> None:
    """Libere l'engine global (utilise par les tests)."""
    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None
