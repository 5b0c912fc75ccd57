"""
Couche services (cas d'usage).

- EpisodeReconciler : rapprochement fichiers video / numeros d'episodes
- SyncService : synchronisation de la progression avec le service de suivi
- LibraryService : importation, ajout d'episodes et progression

Les services dependent des ports de core/, jamais des adaptateurs.
"""
