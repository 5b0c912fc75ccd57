"""
medialist - Suivi personnel de bibliotheque de series.

Ce package tient un catalogue local des series, de leurs episodes et de la
progression de visionnage, reconcilie avec le systeme de fichiers et avec un
service de suivi externe (MyAnimeList ou un service local sans reseau).

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entites, ports, erreurs)
- services/ : Couche application (reconciliation, synchronisation, import)
- adapters/ : Couche infrastructure (CLI, systeme de fichiers, services de suivi)
- infrastructure/ : Persistance SQLite via SQLModel
"""

__version__ = "0.1.0"
