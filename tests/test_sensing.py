import pytest

from fill_model.sensing import level_from_distance, with_level, coordinates, distance_m, recommendation


@pytest.mark.parametrize("distance, level", [
    (20, 80),
    (50, 50),
    (99, 1),
    (0.5, 100),
    (100, 0),
    (140, 0),
    (0, 0),
    (-3, 0),
    (None, 0),
])
def test_level_from_distance(distance, level):
    assert level_from_distance(distance) == level


def test_with_level_only_fills_raw_samples():
    assert with_level({"binId": "A", "distance": 25})["level"] == 75
    assert with_level({"binId": "A", "distance": 25, "level": 10})["level"] == 10
    assert "level" not in with_level({"binId": "A"})


def test_coordinates_from_either_shape():
    assert coordinates({"location": {"latitude": 6.85, "longitude": 79.87}}) == (6.85, 79.87)
    assert coordinates({"latitude": "6.85", "longitude": "79.87"}) == (6.85, 79.87)
    assert coordinates({"binId": "A"}) is None


def test_distance_m():
    assert distance_m(6.8519, 79.8774, 6.8519, 79.8774) == 0
    assert distance_m(0, 0, 1, 0) == 111195
    assert 350 < distance_m(6.8519, 79.8774, 6.8500, 79.8800) < 365


@pytest.mark.parametrize("level, prefix", [
    (95, "🚨 CRITICAL"),
    (90, "🚨 CRITICAL"),
    (75, "⚠️ HIGH"),
    (50, "📊 MEDIUM"),
    (10, "✅ GOOD"),
])
def test_recommendation(level, prefix):
    text = recommendation(level, "Recyclable")
    assert text.startswith(prefix)
    assert "Recyclable bin" in text
