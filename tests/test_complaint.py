import pytest

from backoffice.src.enums import (
    Action,
    ComplaintPriority,
    ComplaintStatus,
    ComplaintType,
    StaffRole,
)
from backoffice.src.urls import URL_ACTION, URL_COMPLAINT, URL_STAFF, URL_USER

URL = "/api" + URL_COMPLAINT


@pytest.fixture
def complaintData():
    return {
        "type": ComplaintType.DELAY,
        "priority": ComplaintPriority.HIGH,
        "subject": "Départ retardé",
        "description": "Le bus de 8h est parti avec une heure de retard.",
    }


def test_create_complaint(client, complaintData):
    response = client.post(URL, json=complaintData)
    assert response.status_code == 201
    complaint = response.json()
    assert complaint["status"] == ComplaintStatus.PENDING
    assert complaint["status_label"] == "En attente"
    assert complaint["type_label"] == "Retard"
    assert complaint["priority_label"] == "Haute"
    assert complaint["priority_color"] == "error"
    assert complaint["resolved_on"] is None


def test_unknown_references_are_rejected(client, complaintData):
    response = client.post(
        URL, json={**complaintData, "user_id": 7, "station_id": 8, "driver_id": 9}
    )
    assert response.status_code == 422
    assert set(response.json()["detail"]) == {"user_id", "station_id", "driver_id"}


def test_complaint_of_a_user(client, complaintData):
    user = client.post(
        "/api" + URL_USER,
        json={"first_name": "Fatou", "last_name": "Diallo", "phone_number": "+33612345678"},
    ).json()
    response = client.post(URL, json={**complaintData, "user_id": user["id"]})
    assert response.status_code == 201

    response = client.get(URL, params={"user_id": user["id"]})
    assert len(response.json()) == 1


def test_resolution_is_final(client, complaintData):
    complaint = client.post(URL, json=complaintData).json()
    response = client.post(
        URL + URL_ACTION,
        json={"id": complaint["id"], "action": Action.START_PROCESSING},
    )
    assert response.json()["status"] == ComplaintStatus.IN_PROGRESS

    response = client.post(
        URL + URL_ACTION, json={"id": complaint["id"], "action": Action.RESOLVE}
    )
    assert response.json()["status"] == ComplaintStatus.RESOLVED
    assert response.json()["resolved_on"] is not None
    assert response.json()["actions"] == []

    response = client.post(
        URL + URL_ACTION,
        json={"id": complaint["id"], "action": Action.START_PROCESSING},
    )
    assert response.status_code == 406


def test_filter_complaints(client, complaintData):
    client.post(URL, json=complaintData)
    client.post(
        URL,
        json={
            **complaintData,
            "type": ComplaintType.REFUND,
            "priority": ComplaintPriority.LOW,
            "subject": "Remboursement",
        },
    )
    response = client.get(URL, params={"priority": ComplaintPriority.LOW})
    assert [row["subject"] for row in response.json()] == ["Remboursement"]
    response = client.get(URL, params={"q": "RETARD"})
    assert len(response.json()) == 2
    response = client.get(URL, params={"type": ComplaintType.DELAY})
    assert [row["subject"] for row in response.json()] == ["Départ retardé"]


def test_unknown_action_value(client, complaintData):
    complaint = client.post(URL, json=complaintData).json()
    response = client.post(URL + URL_ACTION, json={"id": complaint["id"], "action": 99})
    assert response.status_code == 422


def test_driver_reference_survives_a_role_change(client, company, complaintData):
    staffUrl = "/api" + URL_STAFF.format(company_id=company["id"])
    driver = client.post(
        staffUrl,
        json={
            "role": StaffRole.DRIVER,
            "first_name": "Kouassi",
            "last_name": "Yao",
            "phone_number": "+33612345678",
            "license_number": "CI-2018-004512",
            "license_expiry_date": "2030-06-30",
        },
    ).json()
    complaint = client.post(URL, json={**complaintData, "driver_id": driver["id"]}).json()

    response = client.patch(
        staffUrl,
        json={
            "id": driver["id"],
            "role": StaffRole.CASHIER,
            "license_number": None,
            "license_expiry_date": None,
        },
    )
    assert response.status_code == 200

    response = client.patch(
        URL, json={"id": complaint["id"], "priority": ComplaintPriority.LOW}
    )
    assert response.status_code == 200
    assert response.json()["driver_id"] == driver["id"]

    response = client.post(URL, json={**complaintData, "driver_id": driver["id"]})
    assert response.status_code == 422
    assert set(response.json()["detail"]) == {"driver_id"}
