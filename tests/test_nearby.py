import pytest

from commute_insights_api.services.catalogue import ConnectorCatalogue
from commute_insights_api.services.nearby import NearbyStopFinder


@pytest.fixture
def finder(catalogue):
    return NearbyStopFinder(catalogue)


def test_results_stay_within_radius_sorted_by_distance(finder, home):
    results = finder.find_nearby_stops(home.lat, home.lng, radius_km=2.0, max_results=10)

    assert [item.stop.id for item in results] == ["near", "mid-a", "mid-b"]
    assert all(item.distance_km <= 2.0 for item in results)
    distances = [item.distance_km for item in results]
    assert distances == sorted(distances)


def test_equal_distances_keep_catalogue_order(finder, home):
    results = finder.find_nearby_stops(home.lat, home.lng, radius_km=2.0)
    assert results[1].distance_km == results[2].distance_km
    assert [results[1].stop.id, results[2].stop.id] == ["mid-a", "mid-b"]


def test_max_results_truncates(finder, home):
    assert len(finder.find_nearby_stops(home.lat, home.lng, radius_km=10, max_results=2)) == 2
    assert finder.find_nearby_stops(home.lat, home.lng, radius_km=10, max_results=0) == []


def test_distance_is_formatted_for_stop_pins(finder, home):
    closest, mid, _ = finder.find_nearby_stops(home.lat, home.lng, radius_km=2.0)
    assert closest.distance_formatted.endswith("m")
    assert not closest.distance_formatted.endswith("km")
    assert mid.distance_formatted == "1.5km"


def test_nothing_in_range(finder):
    assert finder.find_nearby_stops(40.0, -100.0) == []
    assert ConnectorCatalogue().stops == []
    assert NearbyStopFinder(ConnectorCatalogue()).find_nearby_stops(47.6, -122.3) == []


def test_nearby_pins_mention_distance(finder, home):
    pins = finder.get_nearby_pins(home.lat, home.lng, radius_km=2.0)

    assert [pin.id for pin in pins] == ["near", "mid-a", "mid-b"]
    assert pins[0].type == "connectorStop"
    assert pins[0].description.startswith("Broadway & Pine\n\nDistance: ")
    assert pins[1].description.endswith("Distance: 1.5km from your location")
    assert pins[1].has_parking is True
    assert pins[1].commute_time_to_office_minutes is None


def test_has_nearby_stops_uses_walking_distance(finder, home):
    assert finder.has_nearby_stops(home.lat, home.lng)
    # 1.2 km north of the Eastlake stops; nothing within 1 km.
    assert not finder.has_nearby_stops(47.6393, -122.3200)
    assert finder.has_nearby_stops(47.6393, -122.3200, walking_distance_km=1.5)


def test_summary_judges_walkability_at_one_km(finder):
    summary = finder.get_nearby_summary(47.6393, -122.3200, radius_km=3.0)

    assert summary.count == 4
    assert summary.closest_stop_name == "Mid A"
    assert summary.closest_distance == "1.2km"
    assert summary.has_walkable_stops is False


def test_empty_summary(finder):
    summary = finder.get_nearby_summary(40.0, -100.0)

    assert summary.count == 0
    assert summary.closest_distance is None
    assert summary.closest_stop_name is None
    assert summary.has_walkable_stops is False
