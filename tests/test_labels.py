import pytest

from backoffice.src import labels, workflow
from backoffice.src.enums import (
    ComplaintPriority,
    EntityKind,
    Severity,
    StaffRole,
    StationStatus,
    PromotionStatus,
)


def test_every_status_has_a_label_and_a_color():
    for kind, statusEnum in workflow.STATUS_ENUMS.items():
        for status in statusEnum:
            assert labels.statusLabel(kind, status)
            assert isinstance(labels.statusColor(kind, status), Severity)


def test_every_plain_enum_is_labelled():
    for enumClass, table in labels.LABELS.items():
        assert set(table) == set(enumClass)
    for priority in ComplaintPriority:
        assert labels.priorityLabel(priority)
        assert isinstance(labels.priorityColor(priority), Severity)


def test_known_labels():
    assert labels.statusLabel(EntityKind.STATION, StationStatus.UNDER_MAINTENANCE) == (
        "En maintenance"
    )
    assert labels.statusColor(EntityKind.PROMOTION, PromotionStatus.EXPIRED) == (
        Severity.ERROR
    )
    assert labels.roleLabel(StaffRole.DRIVER) == "Chauffeur"
    assert labels.priorityLabel(ComplaintPriority.HIGH) == "Haute"


def test_unknown_value_raises():
    with pytest.raises(ValueError):
        labels.statusLabel(EntityKind.STATION, 42)
    with pytest.raises(ValueError):
        labels.roleLabel(42)


def test_describe():
    description = labels.describe(EntityKind.STATION, StationStatus.INACTIVE)
    assert description == {
        "status_label": "Inactive",
        "status_color": "error",
        "actions": [1],
    }


def test_catalog_covers_all_enums():
    tables = labels.catalog()
    assert len(tables["StationStatus"]) == len(StationStatus)
    assert tables["ComplaintPriority"][0] == {
        "value": 1,
        "name": "LOW",
        "label": "Basse",
        "color": "info",
    }
    assert "color" not in tables["StaffRole"][0]
