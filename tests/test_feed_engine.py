"""
Tests unitaires du moteur de flux
Filtrage, enrichissement et tri des matchs
"""
import pytest
from datetime import date, datetime, timedelta, timezone

from match_feed.config.feed_settings import FEED_SETTINGS
from match_feed.contracts.input_models import FeedScope, MatchInput
from match_feed.feed.engine import FeedEngine, compute_feed, enrich_match, is_expired
from tests.factories import NOW, create_mock_match, create_mock_match_list, create_viewer_context


def _matches(*records):
    return [MatchInput.model_validate(r) for r in records]


def _ids(feed):
    return [m.id for m in feed]


class TestFiltering:
    """Tests des predicats de visibilite"""

    def test_empty_snapshot_gives_empty_feed(self):
        """Test: Liste vide -> flux vide"""
        assert compute_feed([], create_viewer_context()) == ()

    def test_match_ending_exactly_now_is_excluded(self):
        """Test: Fin exactement a 'now' -> expire (inegalite stricte)"""
        matches = _matches(create_mock_match(start="11:00", end="12:00"))
        assert compute_feed(matches, create_viewer_context()) == ()

    def test_match_ended_before_now_is_excluded(self):
        """Test: Match termine -> exclu"""
        matches = _matches(create_mock_match(start="09:00", end="10:30"))
        assert compute_feed(matches, create_viewer_context()) == ()

    def test_match_in_progress_stays_visible(self):
        """Test: Match commence mais pas termine -> visible, delai negatif"""
        matches = _matches(create_mock_match(start="11:00", end="12:01"))

        feed = compute_feed(matches, create_viewer_context())

        assert _ids(feed) == ["match-001"]
        assert feed[0].minutes_until_start == pytest.approx(-60.0)

    def test_next_day_match_within_24_hours_is_excluded(self):
        """Test: Match le lendemain a 00:30 -> absent du flux du jour"""
        matches = _matches(create_mock_match(date_match="2026-03-15", start="00:30", end="01:30"))

        assert compute_feed(matches, create_viewer_context()) == ()

        next_day = create_viewer_context(selected_date=date(2026, 3, 15))
        assert _ids(compute_feed(matches, next_day)) == ["match-001"]

    def test_selected_date_defaults_to_today(self):
        """Test: Sans date choisie, le jour de 'now' est utilise"""
        ctx = create_viewer_context()
        assert ctx.selected_date == NOW.date()

    def test_mine_scope_keeps_only_creator_matches(self):
        """Test: 'Mes matchs' -> seulement ceux du viewer"""
        matches = _matches(
            create_mock_match(match_id="1", creator_email="a@x.com"),
            create_mock_match(match_id="2", creator_email="b@x.com"),
            create_mock_match(match_id="3", creator_email="a@x.com", distance_km=2.0),
        )

        mine = compute_feed(matches, create_viewer_context(scope=FeedScope.MINE, email="a@x.com"))
        everything = compute_feed(matches, create_viewer_context(scope=FeedScope.ALL, email="a@x.com"))

        assert _ids(mine) == ["1", "3"]
        assert all(m.match.creator_email == "a@x.com" for m in mine)
        assert len(everything) == 3

    def test_mine_scope_without_viewer_is_empty(self):
        """Test: 'Mes matchs' sans viewer connecte -> vide"""
        matches = _matches(create_mock_match(creator_email="a@x.com"))
        ctx = create_viewer_context(scope=FeedScope.MINE, email=None)

        assert compute_feed(matches, ctx) == ()

    def test_search_matches_name_case_insensitive(self):
        """Test: Recherche 'parc' -> seul 'Match au Parc' est retenu"""
        matches = _matches(
            create_mock_match(match_id="1", name="Match au Parc", location="Rue 1, Quartier, Rabat"),
            create_mock_match(match_id="2", name="Match Stade", location="Rue 2, Quartier, Rabat"),
        )

        feed = compute_feed(matches, create_viewer_context(search_text="parc"))

        assert _ids(feed) == ["1"]

    def test_search_matches_location(self):
        """Test: La recherche porte aussi sur la localisation"""
        matches = _matches(
            create_mock_match(match_id="1", name="Foot", location="Complexe, Maarif, CASABLANCA"),
            create_mock_match(match_id="2", name="Foot", location="Complexe, Agdal, Rabat"),
        )

        feed = compute_feed(matches, create_viewer_context(search_text="casa"))

        assert _ids(feed) == ["1"]

    def test_empty_search_matches_everything(self):
        """Test: Recherche vide -> aucun filtre, meme sans nom"""
        matches = _matches(create_mock_match(name="", location=""))
        assert len(compute_feed(matches, create_viewer_context(search_text=""))) == 1

    def test_missing_temporal_fields_are_silently_excluded(self):
        """Test: Sans date ou heure de fin -> exclu, sans exception"""
        matches = _matches(
            create_mock_match(match_id="no-date", date_match=None),
            create_mock_match(match_id="no-end", end=None),
            create_mock_match(match_id="ok"),
        )

        assert _ids(compute_feed(matches, create_viewer_context())) == ["ok"]


class TestEnrichment:
    """Tests du calcul des champs derives"""

    def test_distance_computed_from_viewer_location(self):
        """Test: Distance haversine viewer -> match"""
        match = MatchInput.model_validate(create_mock_match(distance_km=5.0))

        enriched = enrich_match(match, create_viewer_context())

        assert enriched.distance_km == pytest.approx(5.0, rel=1e-3)

    def test_distance_sentinel_without_viewer_location(self):
        """Test: Pas de localisation accordee -> sentinelle"""
        match = MatchInput.model_validate(create_mock_match(distance_km=5.0))

        enriched = enrich_match(match, create_viewer_context(location=None))

        assert enriched.distance_km == FEED_SETTINGS.geo.distance_sentinel_km

    def test_distance_sentinel_without_match_pin(self):
        """Test: Match sans coordonnees -> sentinelle"""
        match = MatchInput.model_validate(create_mock_match(distance_km=None))

        enriched = enrich_match(match, create_viewer_context())

        assert enriched.distance_km == FEED_SETTINGS.geo.distance_sentinel_km

    def test_remaining_places_and_fullness(self):
        """Test: remaining = capacite - inscrits"""
        match = MatchInput.model_validate(create_mock_match(capacity=10, joined=3))

        enriched = enrich_match(match, create_viewer_context())

        assert enriched.remaining_places == 7
        assert enriched.is_full is False

    def test_over_capacity_is_tolerated_and_full(self):
        """Test: Plus d'inscrits que de places -> complet, toujours visible"""
        matches = _matches(create_mock_match(capacity=10, joined=12))

        feed = compute_feed(matches, create_viewer_context())

        assert len(feed) == 1
        assert feed[0].is_full is True
        assert feed[0].remaining_places == -2

    def test_unknown_capacity_is_not_full(self):
        """Test: Capacite inconnue -> pas complet"""
        match = MatchInput.model_validate(create_mock_match(capacity=None, joined=4))

        enriched = enrich_match(match, create_viewer_context())

        assert enriched.is_full is False
        assert enriched.remaining_places is None

    def test_minutes_until_start(self):
        """Test: Delai avant debut en minutes"""
        match = MatchInput.model_validate(create_mock_match(start="18:00", end="19:30"))

        enriched = enrich_match(match, create_viewer_context())

        assert enriched.minutes_until_start == pytest.approx(360.0)

    def test_source_record_is_not_mutated(self):
        """Test: Le match source est embarque tel quel"""
        match = MatchInput.model_validate(create_mock_match())
        before = match.model_dump()

        enriched = enrich_match(match, create_viewer_context())

        assert enriched.match is match
        assert match.model_dump() == before

    def test_display_labels(self):
        """Test: Libelles de la carte calcules avec le match"""
        match = MatchInput.model_validate(create_mock_match(capacity=10, joined=3))

        enriched = enrich_match(match, create_viewer_context())

        assert enriched.format_label == "5v5"
        assert enriched.time_range_label == "18:00 - 19:30"
        assert enriched.places_label == "7 places restantes"
        assert enriched.price_label == "Prix : 50 dh"
        assert enriched.short_location == "Casablanca"
        assert enriched.fill_percent == pytest.approx(30.0)
        assert enriched.is_creator is False

    def test_labels_for_full_match_of_viewer(self):
        match = MatchInput.model_validate(
            create_mock_match(capacity=10, joined=10, creator_email="viewer@example.com")
        )

        enriched = enrich_match(match, create_viewer_context())

        assert enriched.places_label == "Match complet"
        assert enriched.fill_percent == pytest.approx(100.0)
        assert enriched.is_creator is True

    def test_timezone_aware_now(self):
        """Test: 'now' avec fuseau -> heures du match dans le meme fuseau"""
        now = datetime(2026, 3, 14, 12, 0, tzinfo=timezone(timedelta(hours=1)))
        match = MatchInput.model_validate(create_mock_match(start="11:00", end="12:00"))

        assert is_expired(match, now) is True
        assert is_expired(match, now - timedelta(minutes=1)) is False


class TestOrdering:
    """Tests du tri a trois niveaux"""

    def test_concrete_scenario_full_sinks_closer_first(self):
        """Test: [1 complet 1km, 2 libre 5km, 3 libre 1km] -> [3, 2, 1]"""
        matches = _matches(
            create_mock_match(match_id="1", capacity=10, joined=10, distance_km=1.0),
            create_mock_match(match_id="2", capacity=10, joined=3, distance_km=5.0),
            create_mock_match(match_id="3", capacity=10, joined=2, distance_km=1.0),
        )

        assert _ids(compute_feed(matches, create_viewer_context())) == ["3", "2", "1"]

    def test_full_matches_always_after_open_matches(self):
        """Test: Tout match complet apparait apres tout match non complet"""
        records = []
        for i in range(8):
            records.append(create_mock_match(
                match_id=str(i),
                joined=10 if i % 2 == 0 else 4,
                distance_km=float(8 - i),
                start=f"{13 + i}:00",
                end=f"{13 + i}:45",
            ))

        feed = compute_feed(_matches(*records), create_viewer_context())
        flags = [m.is_full for m in feed]

        assert len(feed) == 8
        assert flags == sorted(flags)

    def test_match_with_coordinates_before_match_without(self):
        """Test: Match a 2km avant match sans coordonnees"""
        matches = _matches(
            create_mock_match(match_id="no-pin", distance_km=None, start="13:00", end="14:00"),
            create_mock_match(match_id="pinned", distance_km=2.0, start="20:00", end="21:00"),
        )

        assert _ids(compute_feed(matches, create_viewer_context())) == ["pinned", "no-pin"]

    def test_same_distance_sooner_start_first(self):
        """Test: Egalite de distance -> debut le plus proche d'abord"""
        matches = _matches(
            create_mock_match(match_id="late", start="20:00", end="21:00"),
            create_mock_match(match_id="soon", start="14:00", end="15:00"),
        )

        assert _ids(compute_feed(matches, create_viewer_context())) == ["soon", "late"]

    def test_without_viewer_location_order_by_start(self):
        """Test: Sans localisation, seul le debut departage"""
        matches = _matches(
            create_mock_match(match_id="a", distance_km=1.0, start="19:00", end="20:00"),
            create_mock_match(match_id="b", distance_km=9.0, start="15:00", end="16:00"),
        )

        feed = compute_feed(matches, create_viewer_context(location=None))

        assert _ids(feed) == ["b", "a"]

    def test_unknown_start_time_sorts_last_on_tie(self):
        """Test: Heure de debut inconnue -> apres les autres a distance egale"""
        matches = _matches(
            create_mock_match(match_id="no-start", start=None),
            create_mock_match(match_id="start", start="20:00", end="21:00"),
        )

        assert _ids(compute_feed(matches, create_viewer_context())) == ["start", "no-start"]

    def test_full_ties_keep_fetch_order(self):
        """Test: Tri stable, egalites dans l'ordre de recuperation"""
        matches = _matches(
            create_mock_match(match_id="first"),
            create_mock_match(match_id="second"),
            create_mock_match(match_id="third"),
        )

        assert _ids(compute_feed(matches, create_viewer_context())) == ["first", "second", "third"]


class TestDeterminism:
    """Tests de purete et de memoisation"""

    def test_same_inputs_same_output(self):
        """Test: Deux appels identiques -> sorties egales"""
        matches = _matches(*create_mock_match_list(count=5))
        ctx = create_viewer_context()

        assert compute_feed(matches, ctx) == compute_feed(matches, ctx)

    def test_engine_reuses_last_result(self):
        """Test: Memoisation sur (matchs, contexte) inchanges"""
        engine = FeedEngine()
        matches = _matches(*create_mock_match_list(count=3))
        ctx = create_viewer_context()

        first = engine.compute(matches, ctx)
        second = engine.compute(list(matches), ctx)

        assert second is first
        assert engine.cache_hits == 1

    def test_engine_recomputes_when_context_changes(self):
        """Test: Nouveau contexte -> nouveau calcul, meme resultat que compute_feed"""
        engine = FeedEngine()
        matches = _matches(*create_mock_match_list(count=3))

        engine.compute(matches, create_viewer_context())
        filtered = engine.compute(matches, create_viewer_context(search_text="Match 2"))

        assert engine.cache_hits == 0
        assert _ids(filtered) == ["match-002"]
        assert filtered == compute_feed(matches, create_viewer_context(search_text="Match 2"))

    def test_engine_clear_drops_cache(self):
        """Test: clear() vide le cache"""
        engine = FeedEngine()
        matches = _matches(create_mock_match())
        ctx = create_viewer_context()

        engine.compute(matches, ctx)
        engine.clear()
        engine.compute(matches, ctx)

        assert engine.cache_hits == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
