"""
watchlog - Suivi personnel de films et de series.

Ce package tient une bibliotheque de titres TMDB (statut de suivi, notes,
episodes vus) et reconcilie en continu la progression des series avec leur
etat de diffusion : une serie terminee dont tous les episodes sont vus passe
en completed, une serie en cours a jour reste en watching en attendant de
nouveaux episodes.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entites, ports, objets valeur)
- services/ : Couche application (moteur de reconciliation, cas d'utilisation)
- adapters/ : Couche infrastructure (CLI, client TMDB, instantane local)
- infrastructure/ : Persistance SQLModel de la base distante
"""

__version__ = "0.1.0"
