"""
Helpers d'affichage des cartes de match
"""
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Union

from match_feed.config.feed_settings import FEED_SETTINGS
from match_feed.contracts.input_models import MatchInput, parse_time_of_day


def format_time_of_day(value: Union[time, datetime, str]) -> str:
    """Heure au format 24h 'HH:MM' avec zeros"""
    if isinstance(value, str):
        value = parse_time_of_day(value)
    return f"{value.hour:02d}:{value.minute:02d}"


def time_range_label(start: Optional[time], end: Optional[time]) -> str:
    """'18:00 - 19:30', vide si une borne manque"""
    if start is None or end is None:
        return ""
    return f"{format_time_of_day(start)} - {format_time_of_day(end)}"


def short_location_label(location: Optional[str]) -> str:
    """
    Troisieme segment d'une adresse separee par des virgules

    'Stade, 12 rue X, Casablanca, Maroc' -> 'Casablanca'
    """
    if not location:
        return ""
    parts = location.split(",")
    if len(parts) < 3:
        return ""
    return parts[2].strip()


def remaining_places_label(remaining: Optional[int], is_full: bool) -> str:
    """Badge de places restantes"""
    if is_full:
        return "Match complet"
    if remaining is None:
        return ""
    plural = "s" if remaining > 1 else ""
    return f"{remaining} place{plural} restante{plural}"


def format_label(capacity: Optional[int]) -> str:
    """Format de jeu ('5v5') a partir du nombre de places"""
    if capacity is None:
        return ""
    return FEED_SETTINGS.matches.capacities.get(capacity, "")


def fill_ratio(match: MatchInput) -> float:
    """Pourcentage de remplissage (0 si la capacite est inconnue)"""
    if not match.capacity:
        return 0.0
    return match.joined_count / match.capacity * 100


def price_label(price: Optional[float]) -> str:
    if price is None:
        return ""
    amount = int(price) if float(price).is_integer() else price
    return f"Prix : {amount} {FEED_SETTINGS.matches.currency}"


def upcoming_days(today: date, count: Optional[int] = None) -> List[date]:
    """Jours proposes dans le selecteur de date, a partir d'aujourd'hui"""
    count = count if count is not None else FEED_SETTINGS.matches.calendar_days
    return [today + timedelta(days=offset) for offset in range(count)]


def is_creator(match: MatchInput, email: Optional[str]) -> bool:
    """Le viewer est-il le createur du match"""
    return email is not None and match.creator_email == email
