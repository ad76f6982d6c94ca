from datetime import date, timedelta

from backoffice.src.db import Promotion, Staff, Station, Vehicle
from backoffice.src.enums import Action, CompanyStatus, StaffRole, VehicleType
from backoffice.src.urls import (
    URL_ACTION,
    URL_COMPANY,
    URL_PROMOTION,
    URL_STAFF,
    URL_STATION,
    URL_VEHICLE,
)


def test_create_company(company):
    assert company["status"] == CompanyStatus.ACTIVE
    assert company["phone_number"].startswith("tel:+33")


def test_company_name_is_unique(client, company):
    response = client.post(
        "/api" + URL_COMPANY,
        json={
            "name": company["name"],
            "address": "Ailleurs",
            "phone_number": "+33142685300",
            "email_id": "autre@africar.ci",
        },
    )
    assert response.status_code == 409
    assert response.headers["X-Error"] == "UniqueViolation"


def test_inactive_company_gets_no_stations(client, company, stationData):
    response = client.post(
        "/api" + URL_COMPANY + URL_ACTION,
        json={"id": company["id"], "action": Action.DEACTIVATE},
    )
    assert response.json()["status"] == CompanyStatus.INACTIVE

    response = client.post(
        "/api" + URL_STATION.format(company_id=company["id"]), json=stationData
    )
    assert response.status_code == 412


def test_fetch_and_update_company(client, company):
    response = client.patch(
        "/api" + URL_COMPANY, json={"id": company["id"], "address": "Plateau"}
    )
    assert response.status_code == 200
    assert response.json()["address"] == "Plateau"

    response = client.get("/api" + URL_COMPANY, params={"q": "africar"})
    assert [row["id"] for row in response.json()] == [company["id"]]


def test_update_needs_an_id(client, company):
    response = client.patch("/api" + URL_COMPANY, json={"address": "Plateau"})
    assert response.status_code == 422
    response = client.patch("/api" + URL_COMPANY, json={"id": 999})
    assert response.status_code == 404


def test_health(client):
    response = client.get("/health")
    assert response.json()["status"] == "OK"


def test_delete_company_cascades(client, session, company, stationData):
    station = client.post(
        "/api" + URL_STATION.format(company_id=company["id"]), json=stationData
    ).json()
    client.post(
        "/api" + URL_VEHICLE.format(company_id=company["id"]),
        json={
            "registration_number": "AB-1234-CI",
            "brand": "Mercedes-Benz",
            "model": "Tourismo",
            "type": VehicleType.BUS,
            "year": 2019,
            "capacity": 54,
        },
    )
    client.post(
        "/api" + URL_STAFF.format(company_id=company["id"]),
        json={
            "role": StaffRole.CASHIER,
            "first_name": "Aminata",
            "last_name": "Traoré",
            "phone_number": "+33698765432",
        },
    )
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

    response = client.request("DELETE", "/api" + URL_COMPANY, json={"id": company["id"]})
    assert response.status_code == 204
    assert session.query(Station).count() == 0
    assert session.query(Vehicle).count() == 0
    assert session.query(Staff).count() == 0
    assert session.get(Promotion, promotion["id"]).station_ids == []
