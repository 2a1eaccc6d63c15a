"""
Ordre d'affichage du flux
"""
from functools import cmp_to_key
from typing import Iterable, List

from match_feed.contracts.output_models import EnrichedMatch


def compare_matches(a: EnrichedMatch, b: EnrichedMatch) -> int:
    """
    Comparateur unique a trois niveaux

    1. Matchs non complets avant les matchs complets
    2. Distance croissante (la sentinelle passe en dernier)
    3. Debut le plus proche d'abord (heure de debut inconnue en dernier)
    """
    if a.is_full != b.is_full:
        return 1 if a.is_full else -1
    if a.distance_km != b.distance_km:
        return -1 if a.distance_km < b.distance_km else 1
    if a.minutes_until_start == b.minutes_until_start:
        return 0
    if a.minutes_until_start is None:
        return 1
    if b.minutes_until_start is None:
        return -1
    return -1 if a.minutes_until_start < b.minutes_until_start else 1


def rank_matches(matches: Iterable[EnrichedMatch]) -> List[EnrichedMatch]:
    """Tri stable: les egalites gardent l'ordre de recuperation"""
    return sorted(matches, key=cmp_to_key(compare_matches))
