"""
Display labels and severities of the enumerated values.

Every table is total over its enum: looking up a value outside the enum
raises `ValueError` instead of echoing the raw value back.
"""

from enum import IntEnum
from typing import Dict, List, Tuple, Type
from fastapi.encoders import jsonable_encoder

from backoffice.src.enums import (
    Action,
    EntityKind,
    Severity,
    CompanyStatus,
    StationStatus,
    StaffStatus,
    StaffRole,
    VehicleStatus,
    VehicleType,
    FuelType,
    ComplaintStatus,
    ComplaintPriority,
    ComplaintType,
    PromotionStatus,
    DiscountType,
    UserStatus,
)
from backoffice.src.workflow import STATUS_ENUMS, availableActions


STATUS_LABELS: Dict[EntityKind, Dict[IntEnum, Tuple[str, Severity]]] = {
    EntityKind.COMPANY: {
        CompanyStatus.ACTIVE: ("Active", Severity.SUCCESS),
        CompanyStatus.INACTIVE: ("Inactive", Severity.ERROR),
    },
    EntityKind.STATION: {
        StationStatus.ACTIVE: ("Active", Severity.SUCCESS),
        StationStatus.INACTIVE: ("Inactive", Severity.ERROR),
        StationStatus.UNDER_MAINTENANCE: ("En maintenance", Severity.WARNING),
    },
    EntityKind.STAFF: {
        StaffStatus.ACTIVE: ("En service", Severity.SUCCESS),
        StaffStatus.INACTIVE: ("Inactif", Severity.ERROR),
        StaffStatus.SUSPENDED: ("Suspendu", Severity.ERROR),
        StaffStatus.ON_LEAVE: ("En congé", Severity.WARNING),
    },
    EntityKind.VEHICLE: {
        VehicleStatus.ACTIVE: ("Actif", Severity.SUCCESS),
        VehicleStatus.MAINTENANCE: ("En maintenance", Severity.WARNING),
        VehicleStatus.INACTIVE: ("Inactif", Severity.ERROR),
    },
    EntityKind.COMPLAINT: {
        ComplaintStatus.PENDING: ("En attente", Severity.WARNING),
        ComplaintStatus.IN_PROGRESS: ("En traitement", Severity.INFO),
        ComplaintStatus.RESOLVED: ("Résolu", Severity.SUCCESS),
    },
    EntityKind.PROMOTION: {
        PromotionStatus.ACTIVE: ("Active", Severity.SUCCESS),
        PromotionStatus.SCHEDULED: ("Planifiée", Severity.INFO),
        PromotionStatus.EXPIRED: ("Expirée", Severity.ERROR),
    },
    EntityKind.USER: {
        UserStatus.ACTIVE: ("Actif", Severity.SUCCESS),
        UserStatus.SUSPENDED: ("Suspendu", Severity.ERROR),
    },
}

PRIORITY_LABELS: Dict[ComplaintPriority, Tuple[str, Severity]] = {
    ComplaintPriority.LOW: ("Basse", Severity.INFO),
    ComplaintPriority.MEDIUM: ("Moyenne", Severity.WARNING),
    ComplaintPriority.HIGH: ("Haute", Severity.ERROR),
}

# Plain labels, no severity attached
LABELS: Dict[Type[IntEnum], Dict[IntEnum, str]] = {
    Action: {
        Action.ACTIVATE: "Activer",
        Action.DEACTIVATE: "Désactiver",
        Action.SUSPEND: "Suspendre",
        Action.REINSTATE: "Réactiver",
        Action.START_MAINTENANCE: "Mettre en maintenance",
        Action.END_MAINTENANCE: "Fin de maintenance",
        Action.GRANT_LEAVE: "Mettre en congé",
        Action.END_LEAVE: "Retour de congé",
        Action.START_PROCESSING: "Prendre en charge",
        Action.RESOLVE: "Marquer comme résolu",
        Action.PAUSE: "Mettre en pause",
        Action.EXPIRE: "Clôturer",
    },
    ComplaintType: {
        ComplaintType.OTHER: "Autre",
        ComplaintType.DELAY: "Retard",
        ComplaintType.REFUND: "Remboursement",
        ComplaintType.DRIVER: "Chauffeur",
        ComplaintType.STATION: "Gare",
    },
    StaffRole: {
        StaffRole.ADMIN: "Administrateur",
        StaffRole.DRIVER: "Chauffeur",
        StaffRole.CASHIER: "Caissier",
        StaffRole.TICKET_CONTROLLER: "Contrôleur",
    },
    VehicleType: {
        VehicleType.BUS: "Bus",
        VehicleType.MINIBUS: "Mini-bus",
        VehicleType.VAN: "Van",
    },
    FuelType: {
        FuelType.DIESEL: "Diesel",
        FuelType.PETROL: "Essence",
        FuelType.ELECTRIC: "Électrique",
        FuelType.HYBRID: "Hybride",
    },
    DiscountType: {
        DiscountType.PERCENTAGE: "Pourcentage",
        DiscountType.FIXED: "Montant fixe",
    },
}


def statusLabel(kind: EntityKind, status: int) -> str:
    return STATUS_LABELS[kind][STATUS_ENUMS[kind](status)][0]


def statusColor(kind: EntityKind, status: int) -> Severity:
    return STATUS_LABELS[kind][STATUS_ENUMS[kind](status)][1]


def priorityLabel(priority: int) -> str:
    return PRIORITY_LABELS[ComplaintPriority(priority)][0]


def priorityColor(priority: int) -> Severity:
    return PRIORITY_LABELS[ComplaintPriority(priority)][1]


def label(enumClass: Type[IntEnum], value: int) -> str:
    """Label of a value of one of the `LABELS` enums, e.g. `label(StaffRole, 2)`."""
    return LABELS[enumClass][enumClass(value)]


def typeLabel(complaintType: int) -> str:
    return label(ComplaintType, complaintType)


def roleLabel(role: int) -> str:
    return label(StaffRole, role)


def colorName(severity: Severity) -> str:
    return severity.name.lower()


def describe(kind: EntityKind, status: int) -> dict:
    """
    Status details attached to every entity returned by the API.

    Returns:
        dict: `status_label`, `status_color` and the `actions` allowed now.
    """
    return {
        "status_label": statusLabel(kind, status),
        "status_color": colorName(statusColor(kind, status)),
        "actions": [int(action) for action in availableActions(kind, status)],
    }


def present(kind: EntityKind, entity, exclude: set | None = None) -> dict:
    """JSON-ready copy of an ORM entity with its status details attached."""
    data = jsonable_encoder(entity, exclude=exclude)
    data.update(describe(kind, entity.status))
    return data


def _entries(enumClass: Type[IntEnum], resolve) -> List[dict]:
    entries = []
    for member in enumClass:
        text, severity = resolve(member)
        entry = {"value": int(member), "name": member.name, "label": text}
        if severity is not None:
            entry["color"] = colorName(severity)
        entries.append(entry)
    return entries


def catalog() -> Dict[str, List[dict]]:
    """Every label table, keyed by enum name, as served by the catalog endpoint."""
    tables = {}
    for kind, enumClass in STATUS_ENUMS.items():
        tables[enumClass.__name__] = _entries(
            enumClass, lambda member, kind=kind: STATUS_LABELS[kind][member]
        )
    tables[ComplaintPriority.__name__] = _entries(
        ComplaintPriority, lambda member: PRIORITY_LABELS[member]
    )
    for enumClass, table in LABELS.items():
        tables[enumClass.__name__] = _entries(
            enumClass, lambda member, table=table: (table[member], None)
        )
    return tables
