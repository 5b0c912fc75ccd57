"""
Taxonomie des erreurs de medialist.

Toutes les erreurs du noyau derivent de LibraryError, ce qui permet a la
couche de presentation de les transformer en un message lisible unique.
Les erreurs sont toujours remontees a l'appelant immediat.
"""


class LibraryError(Exception):
    """Erreur de base de medialist."""


class StorageError(LibraryError):
    """Echec d'entree/sortie ou de schema sur le stockage local."""


class ConstraintViolation(LibraryError):
    """
    Violation d'unicite (titre ou service_id deja present).

    Recuperable : l'appelant peut retrouver la ligne existante et
    poursuivre avec elle.
    """


class NotFound(LibraryError):
    """Identifiant introuvable."""


class FileProbeError(LibraryError, OSError):
    """Chemin illisible lors de la recherche de fichiers video."""


class AuthError(LibraryError):
    """Operation distante tentee sans etre authentifie."""


class ParseError(LibraryError, ValueError):
    """Saisie utilisateur ou valeur de configuration mal formee."""


class RemoteError(LibraryError):
    """Echec d'un appel au service de suivi."""
