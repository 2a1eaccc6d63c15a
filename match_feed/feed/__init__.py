"""
Module du flux de matchs
Parsing, filtrage, enrichissement et tri des matchs affiches
"""
from .engine import FeedEngine, compute_feed, enrich_match, is_visible
from .exclusions import ExclusionReason, MatchExclusion, MatchParser, ParseResult
from .formatting import format_time_of_day, short_location_label
from .geo import haversine_distance_km
from .ranking import compare_matches, rank_matches

__all__ = [
    'FeedEngine',
    'compute_feed',
    'enrich_match',
    'is_visible',
    'ExclusionReason',
    'MatchExclusion',
    'MatchParser',
    'ParseResult',
    'format_time_of_day',
    'short_location_label',
    'haversine_distance_km',
    'compare_matches',
    'rank_matches',
]
