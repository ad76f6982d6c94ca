from backoffice.src.enums import Action, PromotionStatus
from backoffice.src.urls import URL_LABELS, URL_WORKFLOWS


def test_labels(client):
    response = client.get("/api" + URL_LABELS)
    assert response.status_code == 200
    tables = response.json()
    assert {"StationStatus", "ComplaintPriority", "Action", "StaffRole"} <= set(tables)
    assert tables["PromotionStatus"][1]["label"] == "Planifiée"


def test_workflows(client):
    response = client.get("/api" + URL_WORKFLOWS)
    assert response.status_code == 200
    promotion = {state["status"]: state for state in response.json()["PROMOTION"]}
    assert promotion[PromotionStatus.EXPIRED]["terminal"] is True
    scheduled = promotion[PromotionStatus.SCHEDULED]
    assert scheduled["actions"][0] == {
        "action": Action.ACTIVATE,
        "name": "ACTIVATE",
        "label": "Activer",
        "to": PromotionStatus.ACTIVE,
    }
