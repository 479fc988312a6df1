"""
Couche infrastructure de watchlog.

Implementations concretes des ports du domaine pour les preoccupations
techniques :

- persistence/ : Stockage distant de la bibliotheque avec SQLModel

Architecture hexagonale : changer de base (ex: PostgreSQL au lieu de SQLite)
ne touche pas la logique metier.
"""
