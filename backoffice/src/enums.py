from enum import IntEnum


class AppID(IntEnum):
    ADMIN = 1


class OrderIn(IntEnum):
    ASC = 1
    DESC = 2


class EntityKind(IntEnum):
    COMPANY = 1
    STATION = 2
    STAFF = 3
    VEHICLE = 4
    COMPLAINT = 5
    PROMOTION = 6
    USER = 7


class Severity(IntEnum):
    SUCCESS = 1
    INFO = 2
    WARNING = 3
    ERROR = 4


class Action(IntEnum):
    ACTIVATE = 1
    DEACTIVATE = 2
    SUSPEND = 3
    REINSTATE = 4
    START_MAINTENANCE = 5
    END_MAINTENANCE = 6
    GRANT_LEAVE = 7
    END_LEAVE = 8
    START_PROCESSING = 9
    RESOLVE = 10
    PAUSE = 11
    EXPIRE = 12


class CompanyStatus(IntEnum):
    ACTIVE = 1
    INACTIVE = 2


class StationStatus(IntEnum):
    ACTIVE = 1
    INACTIVE = 2
    UNDER_MAINTENANCE = 3


class StaffStatus(IntEnum):
    ACTIVE = 1
    INACTIVE = 2
    SUSPENDED = 3
    ON_LEAVE = 4


class StaffRole(IntEnum):
    ADMIN = 1
    DRIVER = 2
    CASHIER = 3
    TICKET_CONTROLLER = 4


class VehicleStatus(IntEnum):
    ACTIVE = 1
    MAINTENANCE = 2
    INACTIVE = 3


class VehicleType(IntEnum):
    BUS = 1
    MINIBUS = 2
    VAN = 3


class FuelType(IntEnum):
    DIESEL = 1
    PETROL = 2
    ELECTRIC = 3
    HYBRID = 4


class ComplaintStatus(IntEnum):
    PENDING = 1
    IN_PROGRESS = 2
    RESOLVED = 3


class ComplaintPriority(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class ComplaintType(IntEnum):
    OTHER = 1
    DELAY = 2
    REFUND = 3
    DRIVER = 4
    STATION = 5


class PromotionStatus(IntEnum):
    ACTIVE = 1
    SCHEDULED = 2
    EXPIRED = 3


class DiscountType(IntEnum):
    PERCENTAGE = 1
    FIXED = 2


class UserStatus(IntEnum):
    ACTIVE = 1
    SUSPENDED = 2
