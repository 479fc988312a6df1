"""
Point d'entrée CLI de watchlog.

Initialise le container DI, configure le logging et fournit les commandes CLI.
"""

from typing import Annotated

import typer
from loguru import logger

from . import __version__
from .adapters.cli.commands import (
    export_command,
    import_library,
    list_library,
    rate_season,
    refresh,
    remove,
    set_status,
    sync,
    toggle_episode,
)
from .config import Settings
from .container import Container
from .logging_config import configure_logging, level_for_verbosity

app = typer.Typer(
    name="watchlog",
    help="Suivi personnel de films et de séries",
)
container = Container()


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Augmenter la verbosite (-v, -vv)"
        ),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Mode silencieux (erreurs uniquement)"),
    ] = False,
) -> None:
    """watchlog - Suivi de films et de séries."""
    if verbose or quiet:
        configure_logging(get_config(), level_for_verbosity(verbose, quiet))


# Commandes de bibliotheque
app.command(name="list")(list_library)
# Note: "import" est un mot reserve Python, donc on utilise name= explicitement
app.command(name="import")(import_library)
app.command(name="export")(export_command)
app.command(name="status")(set_status)
app.command(name="episode")(toggle_episode)
app.command(name="rate-season")(rate_season)
app.command()(remove)

# Commandes reseau
app.command()(refresh)
app.command()(sync)


def get_config() -> Settings:
    """Récupère les paramètres de l'application depuis le container DI."""
    return container.config()


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = get_config()
    logger.info("Configuration watchlog")
    typer.echo(f"Bibliothèque : {config.library_file}")
    typer.echo(f"Base de données : {config.database_url}")
    typer.echo(f"Utilisateur : {config.user_id}")
    typer.echo(f"API TMDB : {'activée' if config.tmdb_enabled else 'désactivée'}")
    typer.echo(f"Langue TMDB : {config.tmdb_language}")
    typer.echo(f"Niveau de log : {config.log_level}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"watchlog v{__version__}")


def main() -> None:
    """Point d'entrée de l'application."""
    configure_logging(get_config())

    logger.info("Démarrage de watchlog", version=__version__)

    app()


if __name__ == "__main__":
    main()
