import pytest
import requests

from backoffice.src import client as clientModule
from backoffice.src.client import BackOfficeClient
from backoffice.src.exceptions import RemoteAPIError

STATIONS = [
    {"id": 1, "name": "Gare d'Adjamé", "city": "Abidjan"},
    {"id": 2, "name": "Gare Routière", "city": "Dakar"},
]


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self.payload = payload
        self.text = str(payload)

    def json(self):
        return self.payload


class Calls(list):
    pass


@pytest.fixture
def recorder(monkeypatch):
    recorder = Calls()

    def respond(status_code, payload):
        def request(method, url, **kwargs):
            recorder.append((method, url, kwargs))
            return FakeResponse(status_code, payload)

        monkeypatch.setattr(clientModule.requests, "request", request)

    recorder.respond = respond
    return recorder


def test_fetch_stations(recorder):
    recorder.respond(200, STATIONS)
    client = BackOfficeClient(3, "http://backoffice/api/")
    assert client.fetchStations(limit=100) == STATIONS
    method, url, kwargs = recorder[0]
    assert method == "GET"
    assert url == "http://backoffice/api/companies/3/stations"
    assert kwargs["params"] == {"limit": 100}


def test_search_loaded_stations(recorder):
    recorder.respond(200, STATIONS)
    client = BackOfficeClient(3)
    client.fetchStations()
    assert client.searchStations("dakar") == [STATIONS[1]]
    assert client.searchStations("") == STATIONS
    assert client.stations == STATIONS


def test_create_station(recorder):
    created = {"id": 3, "name": "Gare Test", "city": "Abidjan"}
    recorder.respond(201, created)
    client = BackOfficeClient(3)
    assert client.createStation({"name": "Gare Test"}) == created
    assert client.stations == [created]
    assert recorder[0][2]["json"] == {"name": "Gare Test"}


def test_failed_create_keeps_stations(recorder):
    recorder.respond(200, STATIONS)
    client = BackOfficeClient(3)
    client.fetchStations()

    recorder.respond(422, {"detail": {"name": "String should have at least 1 character"}})
    with pytest.raises(RemoteAPIError) as error:
        client.createStation({"name": ""})
    assert error.value.remote_status == 422
    assert "name" in error.value.detail
    assert client.stations == STATIONS


def test_unreachable_server(monkeypatch):
    def request(method, url, **kwargs):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(clientModule.requests, "request", request)
    client = BackOfficeClient(3)
    with pytest.raises(RemoteAPIError) as error:
        client.fetchStations()
    assert error.value.status_code == 502
    assert client.stations == []
