import pytest
import requests

from commute_insights_api.core.config import Settings
from commute_insights_api.models.domain import GeocodedAddress, GeoPoint, TransportMode
from commute_insights_api.services.geoapify import GeoapifyClient, GeoapifyError
from commute_insights_api.services.pipeline import (
    AddressNotFoundError,
    CommuteAnalysisService,
    UnknownBuildingError,
)
from commute_insights_api.services.scoring import calculate_overall_score


class RecordingMapBuilder:
    def __init__(self):
        self.calls = []

    def build(self, map_data, output_html, **kwargs):
        self.calls.append((map_data, output_html, kwargs))
        return output_html


@pytest.fixture
def config(tmp_path):
    return Settings(data_dir=tmp_path)


@pytest.fixture
def service(catalogue, geoapify_stub, config):
    return CommuteAnalysisService(catalogue, geoapify_stub, config)


def test_drive_only_by_default(service, geoapify_stub, home):
    analysis = service.analyze("1 Home St", "BUILDING 109", home_location=home)

    assert [score.mode for score in analysis.scores] == [TransportMode.DRIVE]
    assert analysis.scores[0].score == 95
    assert analysis.overall_score == 95
    assert analysis.failed_modes == []
    assert analysis.scoring_stop is None
    assert analysis.map_file is None
    waypoints, mode = geoapify_stub.route_calls[0]
    assert mode is TransportMode.DRIVE
    assert waypoints == [home, GeoPoint(lat=47.6412, lng=-122.1353)]


def test_all_modes(service, home):
    analysis = service.analyze(
        "1 Home St",
        "BUILDING 109",
        home_location=home,
        enable_bike=True,
        enable_walk=True,
        enable_connector=True,
    )

    assert [score.mode for score in analysis.scores] == [
        TransportMode.DRIVE,
        TransportMode.BIKE,
        TransportMode.WALK,
        TransportMode.TRANSIT,
    ]
    assert [score.score for score in analysis.scores] == [95, 44, 0, 86]
    assert analysis.overall_score == calculate_overall_score(analysis.scores)

    assert analysis.scoring_stop.name == "Near Stop"
    assert analysis.scoring_stop.walking_time_minutes == 1
    assert analysis.scoring_stop.commute_time_to_office_minutes == 40


def test_map_payload(service, home):
    analysis = service.analyze(
        "1 Home St", "BUILDING 109", home_location=home, enable_walk=True, enable_connector=True
    )
    pins = analysis.map_data.pins

    assert [pin.id for pin in pins] == ["start", "end", "near", "mid-a", "mid-b"]
    assert pins[0].name == "Home"
    assert pins[0].address.street == "1 Home St"
    assert pins[1].type == "microsoftBuilding"
    assert pins[1].name == "BUILDING 109"
    assert len({pin.id for pin in pins}) == len(pins)
    assert [route.name for route in analysis.map_data.routes] == ["drive route", "walk route"]


def test_failing_mode_is_reported_not_fatal(catalogue, route_payloads, config, home, stub_client_class):
    client = stub_client_class(routes=route_payloads, failures=[TransportMode.BIKE])
    del route_payloads[TransportMode.WALK]
    service = CommuteAnalysisService(catalogue, client, config)

    analysis = service.analyze("1 Home St", "BUILDING 109", home_location=home, enable_bike=True, enable_walk=True)

    assert [score.mode for score in analysis.scores] == [TransportMode.DRIVE]
    assert [failure.mode for failure in analysis.failed_modes] == [TransportMode.BIKE, TransportMode.WALK]
    assert "unavailable" in analysis.failed_modes[0].error
    assert analysis.failed_modes[1].error == "No route found in response"


def test_no_connector_stop_in_range(service):
    tacoma = GeoPoint(lat=47.2529, lng=-122.4443)
    analysis = service.analyze("Tacoma", "BUILDING 109", home_location=tacoma, enable_connector=True)

    assert analysis.scoring_stop is None
    assert [score.mode for score in analysis.scores] == [TransportMode.DRIVE]
    assert [pin.id for pin in analysis.map_data.pins] == ["start", "end"]


def test_home_is_geocoded_when_no_location_given(catalogue, route_payloads, config, home, stub_client_class):
    geocoded = GeocodedAddress(original="1 Home St", formatted="1 Home St, Seattle, WA", coordinates=home)
    client = stub_client_class(routes=route_payloads, geocodes={"1 Home St": geocoded})

    analysis = CommuteAnalysisService(catalogue, client, config).analyze("1 Home St", "BUILDING 109")

    assert analysis.home == geocoded
    assert analysis.scores


def test_ungeocodable_home(service):
    with pytest.raises(AddressNotFoundError):
        service.analyze("nowhere at all", "BUILDING 109")


def test_unknown_building(service, home):
    with pytest.raises(UnknownBuildingError, match="BUILDING 999"):
        service.analyze("1 Home St", "BUILDING 999", home_location=home)


def test_without_client(catalogue, config, home):
    service = CommuteAnalysisService(catalogue, None, config)

    with pytest.raises(GeoapifyError):
        service.analyze("1 Home St", "BUILDING 109")

    analysis = service.analyze("1 Home St", "BUILDING 109", home_location=home, enable_connector=True)
    assert [failure.mode for failure in analysis.failed_modes] == [TransportMode.DRIVE]
    assert [score.mode for score in analysis.scores] == [TransportMode.TRANSIT]


def test_render_centres_on_longest_route(catalogue, geoapify_stub, config, home):
    builder = RecordingMapBuilder()
    service = CommuteAnalysisService(catalogue, geoapify_stub, config, map_builder=builder)

    analysis = service.analyze(
        "1 Home St", "BUILDING 109", home_location=home, enable_bike=True, render_map=True
    )

    map_data, output_html, kwargs = builder.calls[0]
    assert analysis.map_file == output_html
    assert output_html == config.views_dir / "commute_1_home_st_building_109.html"
    assert map_data == analysis.map_data
    assert kwargs["zoom"] == 11
    assert kwargs["center"] == pytest.approx(((47.6150 + 47.6412) / 2, (-122.3200 + -122.1353) / 2))
    assert kwargs["scores"] == analysis.scores


class BrokenSession:
    def __init__(self, error):
        self.error = error
        self.headers = {}
        self.calls = 0

    def get(self, url, params=None, timeout=None):
        self.calls += 1
        raise self.error


@pytest.mark.parametrize(
    "error",
    [
        requests.exceptions.ChunkedEncodingError("connection broken mid-body"),
        requests.exceptions.TooManyRedirects("redirect loop"),
        requests.exceptions.InvalidURL("bad url"),
    ],
)
def test_transport_errors_only_fail_the_mode(catalogue, config, home, error):
    session = BrokenSession(error)
    client = GeoapifyClient(config, api_key="secret", session=session)
    service = CommuteAnalysisService(catalogue, client, config)

    analysis = service.analyze("1 Home St", "BUILDING 109", home_location=home, enable_connector=True)

    assert [failure.mode for failure in analysis.failed_modes] == [TransportMode.DRIVE]
    assert [score.mode for score in analysis.scores] == [TransportMode.TRANSIT]
    assert analysis.overall_score == analysis.scores[0].score
    assert session.calls == 1
