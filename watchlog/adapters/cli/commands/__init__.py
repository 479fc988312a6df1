"""Sous-package CLI commands - re-exporte les commandes publiques."""

from watchlog.adapters.cli.commands.library_commands import (
    export_command,
    import_library,
    list_library,
    rate_season,
    remove,
    set_status,
    toggle_episode,
)
from watchlog.adapters.cli.commands.sync_commands import refresh, sync

__all__ = [
    # bibliotheque
    "export_command",
    "import_library",
    "list_library",
    "rate_season",
    "remove",
    "set_status",
    "toggle_episode",
    # reseau
    "refresh",
    "sync",
]
