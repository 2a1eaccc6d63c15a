"""
Tests des helpers d'affichage et de distance
"""
import math
import pytest
from datetime import date, datetime, time

from match_feed.contracts.input_models import Coordinates, MatchInput
from match_feed.feed.engine import compute_feed
from match_feed.feed.formatting import (
    fill_ratio,
    format_label,
    format_time_of_day,
    is_creator,
    price_label,
    remaining_places_label,
    short_location_label,
    time_range_label,
    upcoming_days,
)
from match_feed.feed.geo import distance_to_match_km, haversine_distance_km
from tests.factories import create_mock_match, create_viewer_context


class TestHaversine:
    """Tests du calcul de distance"""

    def test_same_point_is_zero(self):
        """Test: Meme point -> 0 km"""
        assert haversine_distance_km(33.5731, -7.5898, 33.5731, -7.5898) == 0.0

    def test_paris_london(self):
        """Test: Paris -> Londres ~ 343.5 km"""
        distance = haversine_distance_km(48.8566, 2.3522, 51.5074, -0.1278)
        assert distance == pytest.approx(343.5, rel=0.01)

    def test_symmetric(self):
        """Test: d(a, b) == d(b, a)"""
        there = haversine_distance_km(33.5731, -7.5898, 34.0209, -6.8416)
        back = haversine_distance_km(34.0209, -6.8416, 33.5731, -7.5898)
        assert there == pytest.approx(back)

    def test_custom_radius(self):
        """Test: Le rayon est parametrable"""
        unit = haversine_distance_km(0.0, 0.0, 0.0, 90.0, radius_km=1.0)
        assert unit == pytest.approx(3.14159265 / 2)

    def test_near_antipodal_points(self):
        """Test: Points quasi antipodaux -> demi-circonference, sans erreur"""
        half_circumference = math.pi * 6371.0

        assert haversine_distance_km(-12.0, 0.0, 12.0, 180.0) == pytest.approx(half_circumference)
        assert haversine_distance_km(-82.0, 0.0, 82.0, 180.0) == pytest.approx(half_circumference)

        ctx = create_viewer_context(location=Coordinates(latitude=-12.0, longitude=0.0))
        match = MatchInput.model_validate(create_mock_match(latitude=12.0, longitude=180.0))
        feed = compute_feed([match], ctx)

        assert len(feed) == 1
        assert feed[0].distance_km == pytest.approx(half_circumference)
        assert feed[0].distance_km < 99999.0

    def test_sentinel_when_position_missing(self):
        """Test: Position manquante -> sentinelle"""
        point = Coordinates(latitude=33.0, longitude=-7.0)
        assert distance_to_match_km(None, point, sentinel_km=99999.0) == 99999.0
        assert distance_to_match_km(point, None, sentinel_km=99999.0) == 99999.0


class TestTimeFormatting:
    """Tests du format HH:MM"""

    def test_zero_padded(self):
        """Test: 7h05 -> '07:05'"""
        assert format_time_of_day(time(7, 5)) == "07:05"

    def test_from_datetime(self):
        assert format_time_of_day(datetime(2026, 3, 14, 21, 30, 59)) == "21:30"

    def test_from_api_string_with_seconds(self):
        """Test: '18:00:00' -> '18:00'"""
        assert format_time_of_day("18:00:00") == "18:00"

    def test_time_range(self):
        assert time_range_label(time(18, 0), time(19, 30)) == "18:00 - 19:30"
        assert time_range_label(None, time(19, 30)) == ""


class TestLocationLabel:
    """Tests du libelle court de localisation"""

    def test_third_segment_trimmed(self):
        """Test: Troisieme segment, espaces retires"""
        assert short_location_label("Stade, 12 rue X,  Casablanca , Maroc") == "Casablanca"

    def test_fewer_than_three_segments(self):
        """Test: Moins de trois segments -> vide"""
        assert short_location_label("Stade, Casablanca") == ""
        assert short_location_label("") == ""
        assert short_location_label(None) == ""


class TestCardLabels:
    """Tests des libelles de carte et de detail"""

    def test_remaining_places_label(self):
        """Test: Badge complet / singulier / pluriel"""
        assert remaining_places_label(0, True) == "Match complet"
        assert remaining_places_label(1, False) == "1 place restante"
        assert remaining_places_label(3, False) == "3 places restantes"

    def test_format_label(self):
        """Test: Capacite -> format de jeu"""
        assert format_label(8) == "4v4"
        assert format_label(10) == "5v5"
        assert format_label(12) == "6v6"
        assert format_label(7) == ""
        assert format_label(None) == ""

    def test_fill_ratio(self):
        """Test: Pourcentage de remplissage, 0 sans capacite"""
        assert fill_ratio(MatchInput.model_validate(create_mock_match(capacity=10, joined=4))) == pytest.approx(40.0)
        assert fill_ratio(MatchInput.model_validate(create_mock_match(capacity=None, joined=4))) == 0.0

    def test_price_label(self):
        assert price_label(50) == "Prix : 50 dh"
        assert price_label(None) == ""

    def test_upcoming_days(self):
        """Test: 21 jours a partir d'aujourd'hui"""
        days = upcoming_days(date(2026, 3, 14))
        assert len(days) == 21
        assert days[0] == date(2026, 3, 14)
        assert days[-1] == date(2026, 4, 3)

    def test_is_creator(self):
        """Test: Createur reconnu par email"""
        match = MatchInput.model_validate(create_mock_match(creator_email="a@x.com"))
        assert is_creator(match, "a@x.com") is True
        assert is_creator(match, "b@x.com") is False
        assert is_creator(match, None) is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
