"""Stockage local de la bibliotheque."""

from watchlog.adapters.storage.json_snapshot import JsonFileSnapshotStore

__all__ = ["JsonFileSnapshotStore"]
