"""
Determination de la sortie d'un titre (film ou serie) par rapport a aujourd'hui.

La comparaison se fait a la granularite du jour calendaire local : un titre
qui sort aujourd'hui est considere comme sorti.
"""

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Optional

from watchlog.core.entities.library import LibraryEntry
from watchlog.core.value_objects.statuses import MediaType


def parse_release_date(value: Any) -> Optional[date]:
    """
    Convertit une date de sortie TMDB en date calendaire locale.

    Accepte les chaines ISO ("2019-04-01", "2019-04-01T20:00:00Z"),
    les objets date et datetime. Une datetime avec fuseau est ramenee
    dans le fuseau local avant troncature au jour.

    Returns:
        La date, ou None si la valeur est vide ou illisible
    """
    if isinstance(value, datetime):
        return value.astimezone().date() if value.tzinfo else value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return parsed.astimezone().date() if parsed.tzinfo else parsed.date()


def is_released_date(value: Any, today: Optional[date] = None) -> bool:
    """Vrai si la date est passee ou egale a aujourd'hui (faux si illisible)."""
    release = parse_release_date(value)
    if release is None:
        return False
    return release <= (today or date.today())


def is_released_item(item: Any, today: Optional[date] = None) -> bool:
    """
    Vrai si le titre est sorti.

    Utilise release_date pour un film et first_air_date pour une serie.

    Args:
        item: LibraryEntry ou payload (dict avec la cle mediaType)
        today: Date de reference (aujourd'hui par defaut)
    """
    if isinstance(item, LibraryEntry):
        media_type = item.media_type
        fields: Mapping[str, Any] = item.metadata
    elif isinstance(item, Mapping):
        media_type = MediaType.parse(item.get("mediaType"))
        fields = item
    else:
        return False

    key = "release_date" if media_type == MediaType.MOVIE else "first_air_date"
    return is_released_date(fields.get(key), today=today)
