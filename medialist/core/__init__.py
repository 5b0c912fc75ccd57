"""
Couche domaine (core).

Contient les entites metier, les ports (interfaces abstraites) et la
taxonomie d'erreurs. Cette couche n'a AUCUNE dependance vers l'infrastructure.

Sous-packages :
- entities/ : Entites metier (Show, Episode, TitleSort)
- ports/ : Interfaces abstraites pour la persistance, le systeme de fichiers
  et les services de suivi
- errors.py : Exceptions remontees aux appelants
"""
