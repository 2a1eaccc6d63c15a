"""
Moteur du flux de matchs
Filtrage, enrichissement et tri d'un instantane de matchs pour un viewer

Fonction pure: memes entrees, meme sortie, aucune I/O.
"""
import logging
from datetime import date, datetime, time
from typing import Iterable, List, Optional, Sequence, Tuple

from match_feed.config.feed_settings import FEED_SETTINGS, FeedSettings
from match_feed.contracts.input_models import FeedScope, MatchInput, ViewerContext
from match_feed.contracts.output_models import EnrichedMatch
from match_feed.feed.formatting import (
    fill_ratio,
    format_label,
    is_creator,
    price_label,
    remaining_places_label,
    short_location_label,
    time_range_label,
)
from match_feed.feed.geo import distance_to_match_km
from match_feed.feed.ranking import rank_matches

logger = logging.getLogger(__name__)


def match_instant(day: date, moment: time, now: datetime) -> datetime:
    """Instant local d'un match, dans le meme fuseau que 'now'"""
    return datetime.combine(day, moment, tzinfo=now.tzinfo)


def has_schedule(match: MatchInput) -> bool:
    return match.date_match is not None and match.end_time is not None


def is_expired(match: MatchInput, now: datetime) -> bool:
    """Un match se terminant exactement a 'now' est expire"""
    return match_instant(match.date_match, match.end_time, now) <= now


def is_on_day(match: MatchInput, day: date) -> bool:
    return match.date_match == day


def in_scope(match: MatchInput, scope: FeedScope, email: Optional[str]) -> bool:
    """Sans viewer connecte, 'mes matchs' est vide"""
    if scope == FeedScope.MINE:
        return email is not None and match.creator_email == email
    return True


def matches_search(match: MatchInput, search_text: str) -> bool:
    """Recherche insensible a la casse sur le nom ou la localisation"""
    if not search_text:
        return True
    needle = search_text.lower()
    return needle in match.name.lower() or needle in match.location.lower()


def is_visible(match: MatchInput, ctx: ViewerContext) -> bool:
    """Tous les predicats doivent etre satisfaits"""
    return (
        has_schedule(match)
        and not is_expired(match, ctx.now)
        and is_on_day(match, ctx.selected_date)
        and in_scope(match, ctx.selected_scope, ctx.current_user_email)
        and matches_search(match, ctx.search_text)
    )


def enrich_match(
    match: MatchInput,
    ctx: ViewerContext,
    settings: Optional[FeedSettings] = None
) -> EnrichedMatch:
    """
    Calcule distance, remplissage, delai avant le debut et libelles

    Args:
        match: Match valide (date et heure de fin presentes)
        ctx: Contexte du viewer
        settings: Configuration (globale par defaut)

    Returns:
        EnrichedMatch embarquant le match source
    """
    settings = settings or FEED_SETTINGS

    distance = distance_to_match_km(
        ctx.current_location,
        match.coordinates,
        sentinel_km=settings.geo.distance_sentinel_km,
        radius_km=settings.geo.earth_radius_km
    )

    # Le surbooking est tolere: remaining peut etre negatif
    remaining = None
    if match.capacity is not None:
        remaining = match.capacity - match.joined_count
    is_full = remaining is not None and remaining <= 0

    minutes_until_start = None
    if match.start_time is not None:
        start = match_instant(match.date_match, match.start_time, ctx.now)
        minutes_until_start = (start - ctx.now).total_seconds() / 60

    return EnrichedMatch(
        match=match,
        distance_km=distance,
        is_full=is_full,
        remaining_places=remaining,
        minutes_until_start=minutes_until_start,
        format_label=format_label(match.capacity),
        time_range_label=time_range_label(match.start_time, match.end_time),
        places_label=remaining_places_label(remaining, is_full),
        price_label=price_label(match.price),
        short_location=short_location_label(match.location),
        fill_percent=fill_ratio(match),
        is_creator=is_creator(match, ctx.current_user_email)
    )


def compute_feed(
    matches: Iterable[MatchInput],
    ctx: ViewerContext,
    settings: Optional[FeedSettings] = None
) -> Tuple[EnrichedMatch, ...]:
    """
    Produit le flux ordonne et filtre pour un viewer

    Args:
        matches: Instantane des matchs (ordre de recuperation)
        ctx: Contexte du viewer (date, portee, recherche, position, now)
        settings: Configuration (globale par defaut)

    Returns:
        Tuple d'EnrichedMatch tries
    """
    candidates: List[MatchInput] = [m for m in matches if is_visible(m, ctx)]
    enriched = [enrich_match(m, ctx, settings) for m in candidates]
    ranked = tuple(rank_matches(enriched))

    logger.debug(f"Flux calcule: {len(ranked)} matchs visibles pour le {ctx.selected_date}")
    return ranked


class FeedEngine:
    """
    Moteur memoise: reutilise le dernier resultat si (matchs, contexte)
    n'a pas change

    Optimisation uniquement, le resultat est identique a compute_feed.
    """

    def __init__(self, settings: Optional[FeedSettings] = None):
        self.settings = settings or FEED_SETTINGS
        self._last: Optional[Tuple[Tuple[Tuple[MatchInput, ...], ViewerContext], Tuple[EnrichedMatch, ...]]] = None
        self.cache_hits = 0

    def compute(self, matches: Sequence[MatchInput], ctx: ViewerContext) -> Tuple[EnrichedMatch, ...]:
        if not self.settings.cache.enabled:
            return compute_feed(matches, ctx, self.settings)

        key = (tuple(matches), ctx)
        last = self._last
        if last is not None and last[0] == key:
            self.cache_hits += 1
            return last[1]

        result = compute_feed(key[0], ctx, self.settings)
        # Affectation unique: un appel concurrent voit l'ancienne ou la nouvelle paire
        self._last = (key, result)
        return result

    def clear(self) -> None:
        self._last = None
