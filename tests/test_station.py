from datetime import date, timedelta

from backoffice.src.db import Complaint, Promotion, Staff, Station, Vehicle
from backoffice.src.enums import Action, StaffRole, StationStatus, VehicleType
from backoffice.src.urls import (
    URL_ACTION,
    URL_COMPLAINT,
    URL_PROMOTION,
    URL_STAFF,
    URL_STATION,
    URL_VEHICLE,
)


def stationUrl(company):
    return "/api" + URL_STATION.format(company_id=company["id"])


def test_create_station(client, session, company, stationData):
    existing = client.post(
        stationUrl(company), json={**stationData, "name": "Gare Nord"}
    ).json()

    response = client.post(stationUrl(company), json=stationData)
    assert response.status_code == 201
    station = response.json()
    assert station["name"] == "Gare Test"
    assert station["city"] == "Abidjan"
    assert station["capacity"] == 50
    assert station["status"] == StationStatus.ACTIVE
    assert station["status_label"] == "Active"
    assert station["status_color"] == "success"
    assert station["actions"] == [Action.DEACTIVATE, Action.START_MAINTENANCE]
    assert station["id"] != existing["id"]
    assert session.query(Station).count() == 2


def test_empty_required_field_adds_nothing(client, session, company, stationData):
    response = client.post(stationUrl(company), json={**stationData, "name": ""})
    assert response.status_code == 422
    assert response.headers["X-Error"] == "InvalidForm"
    assert "name" in response.json()["detail"]
    assert session.query(Station).count() == 0


def test_duplicate_name_conflicts(client, company, stationData):
    assert client.post(stationUrl(company), json=stationData).status_code == 201
    response = client.post(stationUrl(company), json=stationData)
    assert response.status_code == 409


def test_unknown_company(client, stationData):
    response = client.post(
        "/api" + URL_STATION.format(company_id=999), json=stationData
    )
    assert response.status_code == 404


def test_update_station(client, company, stationData):
    station = client.post(stationUrl(company), json=stationData).json()
    response = client.patch(
        stationUrl(company),
        json={"id": station["id"], "capacity": 75, "email_id": "gare@africar.ci"},
    )
    assert response.status_code == 200
    assert response.json()["capacity"] == 75
    assert response.json()["email_id"] == "gare@africar.ci"
    assert response.json()["name"] == "Gare Test"


def test_update_cannot_change_status(client, company, stationData):
    station = client.post(stationUrl(company), json=stationData).json()
    response = client.patch(
        stationUrl(company),
        json={"id": station["id"], "status": StationStatus.INACTIVE},
    )
    assert response.status_code == 200
    assert response.json()["status"] == StationStatus.ACTIVE


def test_invalid_update_keeps_station(client, session, company, stationData):
    station = client.post(stationUrl(company), json=stationData).json()
    response = client.patch(
        stationUrl(company), json={"id": station["id"], "city": " "}
    )
    assert response.status_code == 422
    assert session.get(Station, station["id"]).city == "Abidjan"


def test_station_actions(client, company, stationData):
    station = client.post(stationUrl(company), json=stationData).json()
    url = stationUrl(company) + URL_ACTION
    response = client.post(
        url, json={"id": station["id"], "action": Action.START_MAINTENANCE}
    )
    assert response.status_code == 200
    assert response.json()["status"] == StationStatus.UNDER_MAINTENANCE
    assert response.json()["status_color"] == "warning"

    response = client.post(url, json={"id": station["id"], "action": Action.ACTIVATE})
    assert response.status_code == 406
    assert response.headers["X-Error"] == "InvalidStateTransition"


def test_delete_station(client, session, company, stationData):
    station = client.post(stationUrl(company), json=stationData).json()
    response = client.request("DELETE", stationUrl(company), json={"id": station["id"]})
    assert response.status_code == 204
    assert session.query(Station).count() == 0
    response = client.request("DELETE", stationUrl(company), json={"id": station["id"]})
    assert response.status_code == 204


def test_fetch_stations(client, company, stationData):
    client.post(stationUrl(company), json=stationData)
    client.post(
        stationUrl(company),
        json={
            **stationData,
            "name": "Gare de Bouaké",
            "city": "Bouaké",
            "latitude": "7.6906",
            "longitude": "-5.0301",
        },
    )

    response = client.get(stationUrl(company), params={"q": "bouak"})
    assert [station["name"] for station in response.json()] == ["Gare de Bouaké"]

    response = client.get(
        stationUrl(company),
        params={"location": "POINT (-5.03 7.69)", "order_by": 4, "order_in": 1},
    )
    assert [station["city"] for station in response.json()] == ["Bouaké", "Abidjan"]

    response = client.get(stationUrl(company), params={"location": "POINT (200 95)"})
    assert response.status_code == 406


def test_numeric_coordinates(client, company, stationData):
    response = client.post(
        stationUrl(company),
        json={**stationData, "latitude": 0.00001, "longitude": -4},
    )
    assert response.status_code == 201
    assert response.json()["latitude"] == 0.00001
    assert response.json()["longitude"] == -4


def test_search_is_literal(client, company, stationData):
    client.post(stationUrl(company), json=stationData)
    client.post(
        stationUrl(company),
        json={**stationData, "name": "Gare_Nord", "city": "Yamoussoukro"},
    )

    response = client.get(stationUrl(company), params={"q": "%"})
    assert response.json() == []
    response = client.get(stationUrl(company), params={"q": "_"})
    assert [station["name"] for station in response.json()] == ["Gare_Nord"]
    response = client.get(stationUrl(company), params={"name": "e_N"})
    assert [station["name"] for station in response.json()] == ["Gare_Nord"]


def test_delete_station_detaches_references(client, session, company, stationData):
    station = client.post(stationUrl(company), json=stationData).json()
    vehicle = client.post(
        "/api" + URL_VEHICLE.format(company_id=company["id"]),
        json={
            "registration_number": "AB-1234-CI",
            "brand": "Mercedes-Benz",
            "model": "Tourismo",
            "type": VehicleType.BUS,
            "year": 2019,
            "capacity": 54,
            "station_id": station["id"],
        },
    ).json()
    staffUrl = "/api" + URL_STAFF.format(company_id=company["id"])
    staff = client.post(
        staffUrl,
        json={
            "role": StaffRole.CASHIER,
            "first_name": "Aminata",
            "last_name": "Traoré",
            "phone_number": "+33698765432",
            "station_id": station["id"],
        },
    ).json()
    complaint = client.post(
        "/api" + URL_COMPLAINT,
        json={
            "subject": "Salle d'attente fermée",
            "description": "La salle d'attente était fermée à 6h.",
            "station_id": station["id"],
        },
    ).json()
    today = date.today()
    promotion = client.post(
        "/api" + URL_PROMOTION,
        json={
            "title": "Tabaski",
            "discount_value": 10,
            "start_date": str(today),
            "end_date": str(today + timedelta(days=10)),
            "station_ids": [station["id"]],
        },
    ).json()

    response = client.request("DELETE", stationUrl(company), json={"id": station["id"]})
    assert response.status_code == 204

    assert session.get(Vehicle, vehicle["id"]).station_id is None
    assert session.get(Staff, staff["id"]).station_id is None
    assert session.get(Complaint, complaint["id"]).station_id is None
    assert session.get(Promotion, promotion["id"]).station_ids == []

    response = client.patch(
        "/api" + URL_PROMOTION, json={"id": promotion["id"], "title": "Tabaski 2030"}
    )
    assert response.status_code == 200
    assert response.json()["title"] == "Tabaski 2030"
    response = client.patch(staffUrl, json={"id": staff["id"], "city": "Abidjan"})
    assert response.status_code == 200
