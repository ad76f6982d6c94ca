"""
Minimal HTTP client of the station endpoints.

Holds the stations of one company loaded from the API so a front-end can
search them locally. Every call is a single request without retry; a
failed call raises `RemoteAPIError` and leaves the loaded stations as
they were.
"""

import logging
import requests
from http import HTTPStatus
from typing import Any, Dict, List

from backoffice.src import exceptions
from backoffice.src.constants import BACKOFFICE_API_URL, CLIENT_TIMEOUT
from backoffice.src.functions import filterRecords
from backoffice.src.urls import URL_STATION

logger = logging.getLogger("BackOfficeClient")


class BackOfficeClient:
    def __init__(self, company_id: int, base_url: str = BACKOFFICE_API_URL):
        self.company_id = company_id
        self.url = base_url.rstrip("/") + URL_STATION.format(company_id=company_id)
        self.stations: List[Dict[str, Any]] = []

    def _call(self, method: str, expected: int, **kwargs) -> Any:
        try:
            response = requests.request(
                method, self.url, timeout=CLIENT_TIMEOUT, **kwargs
            )
        except requests.RequestException as e:
            logger.error(f"{method} {self.url} failed: {e}")
            raise exceptions.RemoteAPIError(str(e))
        if response.status_code != expected:
            try:
                detail = response.json().get("detail", response.text)
            except ValueError:
                detail = response.text
            logger.error(f"{method} {self.url} returned {response.status_code}")
            raise exceptions.RemoteAPIError(detail, response.status_code)
        return response.json()

    def fetchStations(self, **params) -> List[Dict[str, Any]]:
        """
        Load the stations of the company, replacing the ones held.
        Keyword arguments are passed as query parameters (e.g. `limit=100`).
        """
        stations = self._call("GET", HTTPStatus.OK, params=params)
        self.stations = stations
        return stations

    def createStation(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a station and add it to the ones held."""
        station = self._call("POST", HTTPStatus.CREATED, json=data)
        self.stations = self.stations + [station]
        return station

    def searchStations(self, query: str | None) -> List[Dict[str, Any]]:
        return filterRecords(self.stations, query, ["name", "city"])
