import pytest

from backoffice.src.enums import Action, StaffRole, StaffStatus
from backoffice.src.urls import URL_ACTION, URL_DRIVER, URL_STAFF, URL_STATION


def staffUrl(company):
    return "/api" + URL_STAFF.format(company_id=company["id"])


@pytest.fixture
def driverData():
    return {
        "role": StaffRole.DRIVER,
        "first_name": "Kouassi",
        "last_name": "Yao",
        "phone_number": "+33612345678",
        "license_number": "CI-2018-004512",
        "license_expiry_date": "2030-06-30",
    }


@pytest.fixture
def cashierData():
    return {
        "role": StaffRole.CASHIER,
        "first_name": "Aminata",
        "last_name": "Traoré",
        "phone_number": "+33698765432",
        "can_process_payments": True,
    }


def test_create_driver(client, company, driverData):
    response = client.post(staffUrl(company), json=driverData)
    assert response.status_code == 201
    driver = response.json()
    assert driver["status"] == StaffStatus.ACTIVE
    assert driver["status_label"] == "En service"
    assert driver["role_label"] == "Chauffeur"
    assert driver["join_date"]


def test_driver_without_license_is_rejected(client, company, driverData):
    del driverData["license_number"]
    response = client.post(staffUrl(company), json=driverData)
    assert response.status_code == 422
    assert set(response.json()["detail"]) == {"license_number"}


def test_station_of_another_company_is_rejected(
    client, company, driverData, stationData
):
    other = client.post(
        "/api/companies",
        json={
            "name": "Autre compagnie",
            "address": "Bouaké",
            "phone_number": "+33142685300",
            "email_id": "autre@africar.ci",
        },
    ).json()
    station = client.post(
        "/api" + URL_STATION.format(company_id=other["id"]), json=stationData
    ).json()
    response = client.post(
        staffUrl(company), json={**driverData, "station_id": station["id"]}
    )
    assert response.status_code == 422
    assert "station_id" in response.json()["detail"]


def test_role_change_requires_clearing_driver_fields(client, company, driverData):
    driver = client.post(staffUrl(company), json=driverData).json()
    response = client.patch(
        staffUrl(company), json={"id": driver["id"], "role": StaffRole.ADMIN}
    )
    assert response.status_code == 422

    response = client.patch(
        staffUrl(company),
        json={
            "id": driver["id"],
            "role": StaffRole.ADMIN,
            "license_number": None,
            "license_expiry_date": None,
        },
    )
    assert response.status_code == 200
    assert response.json()["role"] == StaffRole.ADMIN
    assert response.json()["license_number"] is None


def test_staff_leave_cycle(client, company, driverData):
    driver = client.post(staffUrl(company), json=driverData).json()
    url = staffUrl(company) + URL_ACTION
    response = client.post(url, json={"id": driver["id"], "action": Action.GRANT_LEAVE})
    assert response.json()["status"] == StaffStatus.ON_LEAVE
    assert response.json()["actions"] == [Action.DEACTIVATE, Action.END_LEAVE]

    response = client.post(url, json={"id": driver["id"], "action": Action.SUSPEND})
    assert response.status_code == 406


def test_drivers_listing(client, company, driverData, cashierData):
    client.post(staffUrl(company), json=driverData)
    client.post(staffUrl(company), json=cashierData)

    response = client.get("/api" + URL_DRIVER.format(company_id=company["id"]))
    assert [staff["first_name"] for staff in response.json()] == ["Kouassi"]

    response = client.get(
        staffUrl(company), params={"role": StaffRole.CASHIER, "q": "traor"}
    )
    assert [staff["first_name"] for staff in response.json()] == ["Aminata"]

    response = client.get(staffUrl(company))
    assert len(response.json()) == 2
