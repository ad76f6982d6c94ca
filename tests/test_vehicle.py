import pytest

from backoffice.src.enums import Action, VehicleStatus, VehicleType
from backoffice.src.urls import URL_ACTION, URL_STAFF, URL_VEHICLE


def vehicleUrl(company):
    return "/api" + URL_VEHICLE.format(company_id=company["id"])


@pytest.fixture
def vehicleData():
    return {
        "registration_number": "ab-1234-ci",
        "brand": "Mercedes-Benz",
        "model": "Tourismo",
        "type": VehicleType.BUS,
        "year": 2019,
        "capacity": 54,
    }


def test_create_vehicle(client, company, vehicleData):
    response = client.post(vehicleUrl(company), json=vehicleData)
    assert response.status_code == 201
    vehicle = response.json()
    assert vehicle["registration_number"] == "AB-1234-CI"
    assert vehicle["status"] == VehicleStatus.ACTIVE
    assert vehicle["mileage"] == 0
    assert vehicle["has_toilet"] is False


def test_registration_is_unique_per_company(client, company, vehicleData):
    client.post(vehicleUrl(company), json=vehicleData)
    response = client.post(vehicleUrl(company), json=vehicleData)
    assert response.status_code == 409


@pytest.mark.parametrize(
    "field, value",
    [("capacity", 0), ("capacity", 500), ("year", 1900), ("registration_number", "#1")],
)
def test_vehicle_limits(client, company, vehicleData, field, value):
    response = client.post(vehicleUrl(company), json={**vehicleData, field: value})
    assert response.status_code == 422
    assert field in response.json()["detail"]


def test_vehicle_maintenance(client, company, vehicleData):
    vehicle = client.post(vehicleUrl(company), json=vehicleData).json()
    url = vehicleUrl(company) + URL_ACTION
    response = client.post(
        url, json={"id": vehicle["id"], "action": Action.START_MAINTENANCE}
    )
    assert response.json()["status"] == VehicleStatus.MAINTENANCE
    assert response.json()["status_label"] == "En maintenance"

    response = client.get(
        vehicleUrl(company), params={"status": VehicleStatus.MAINTENANCE}
    )
    assert len(response.json()) == 1


def test_driver_assignment(client, company, vehicleData):
    vehicle = client.post(vehicleUrl(company), json=vehicleData).json()
    driverData = {
        "first_name": "Kouassi",
        "last_name": "Yao",
        "phone_number": "+33612345678",
        "license_number": "CI-2018-004512",
        "license_expiry_date": "2030-06-30",
        "assigned_vehicle_id": vehicle["id"],
    }
    url = "/api" + URL_STAFF.format(company_id=company["id"])
    response = client.post(url, json=driverData)
    assert response.status_code == 201
    assert response.json()["assigned_vehicle_id"] == vehicle["id"]

    response = client.post(url, json={**driverData, "assigned_vehicle_id": 999})
    assert response.status_code == 422
