from sqlalchemy import (
    JSON,
    TEXT,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    create_engine,
    func,
)
from sqlalchemy.orm import declarative_base, sessionmaker

from backoffice.src.constants import DB_URL
from backoffice.src.enums import (
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


# Global DBMS variables
engine = create_engine(url=DB_URL, echo=False)
sessionMaker = sessionmaker(bind=engine, expire_on_commit=False)
ORMbase = declarative_base()


# ----------------------------------- Company DB Models ---------------------------------------#
class Company(ORMbase):
    """
    Represents a transport company operating buses out of its own stations.

    The company is the owner of every station, staff member and vehicle
    managed through the back-office.

    Columns:
        id (Integer):
            Primary key. Unique identifier for the company.

        name (String(64)):
            Name of the company.
            Must be unique and is required.

        status (Integer):
            Enum representing the status of the company.
            Defaults to `CompanyStatus.ACTIVE`.

        address (TEXT):
            Physical or mailing address of the company.
            Must not be null.

        phone_number (TEXT):
            Phone number associated with the company, must not be null.
            Saved and processed in RFC3966 format (https://datatracker.ietf.org/doc/html/rfc3966).

        email_id (TEXT):
            Email address for company-related communication.
            Must not be null.
            Enforce the format prescribed by RFC 5322

        updated_on (DateTime):
            Timestamp automatically updated whenever the company record is modified.

        created_on (DateTime):
            Timestamp indicating when the company record was created.
    """

    __tablename__ = "company"

    id = Column(Integer, primary_key=True)
    name = Column(String(64), nullable=False, unique=True)
    status = Column(Integer, nullable=False, default=CompanyStatus.ACTIVE)
    # Contact details
    address = Column(TEXT, nullable=False)
    phone_number = Column(TEXT, nullable=False)
    email_id = Column(TEXT, nullable=False)
    # Metadata
    updated_on = Column(DateTime(timezone=True), onupdate=func.now())
    created_on = Column(DateTime(timezone=True), nullable=False, default=func.now())


class Station(ORMbase):
    """
    Represents a bus station (gare) run by a company.

    A station has a postal address, an optional contact, a capacity expressed
    as the number of buses it can hold, a WGS 84 coordinate and a set of
    facility flags displayed on the management screens.

    Columns:
        id (Integer):
            Primary key. Issued by the database, never by the client.

        company_id (Integer):
            Foreign key referencing the company that owns the station.
            Deleting the company cascades to its stations.

        name (String(128)):
            Display name of the station. Must be unique per company.

        city (String(64)):
            City in which the station is located. Indexed for searching.

        address (TEXT):
            Street address of the station.

        phone_number (TEXT):
            Optional contact phone number, in RFC3966 format.

        email_id (TEXT):
            Optional contact email address.

        capacity (Integer):
            Number of buses the station can hold. Defaults to 0.

        latitude (Float), longitude (Float):
            Location of the station in SRID 4326 (WGS 84).

        is_main_station (Boolean):
            Whether the station is the main hub of the company.

        has_waiting_room, has_ticket_office, has_parking (Boolean):
            Facility flags.

        status (Integer):
            Operational status (ACTIVE, INACTIVE, UNDER_MAINTENANCE).
            Defaults to `StationStatus.ACTIVE`.
            Only changed through the station workflow.

        updated_on (DateTime), created_on (DateTime):
            Lifecycle timestamps.
    """

    __tablename__ = "station"
    __table_args__ = (UniqueConstraint("name", "company_id"),)

    id = Column(Integer, primary_key=True)
    company_id = Column(
        Integer,
        ForeignKey("company.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(128), nullable=False, index=True)
    city = Column(String(64), nullable=False, index=True)
    address = Column(TEXT, nullable=False)
    # Contact details
    phone_number = Column(TEXT)
    email_id = Column(TEXT)
    capacity = Column(Integer, nullable=False, default=0)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    # Facilities
    is_main_station = Column(Boolean, nullable=False, default=False)
    has_waiting_room = Column(Boolean, nullable=False, default=True)
    has_ticket_office = Column(Boolean, nullable=False, default=True)
    has_parking = Column(Boolean, nullable=False, default=True)
    status = Column(Integer, nullable=False, default=StationStatus.ACTIVE)
    # Metadata
    updated_on = Column(DateTime(timezone=True), onupdate=func.now())
    created_on = Column(DateTime(timezone=True), nullable=False, default=func.now())


class Vehicle(ORMbase):
    """
    Represents a vehicle of a company's fleet.

    Each vehicle is uniquely identified by its registration number within
    a company.

    Columns:
        id (Integer):
            Primary key. Unique identifier for the vehicle.

        company_id (Integer):
            Foreign key referencing the company that owns the vehicle.

        station_id (Integer):
            Optional home station of the vehicle.
            Set to null when the station is deleted.

        registration_number (String(16)):
            Vehicle registration number. Unique per company.

        brand, model (String(32)):
            Manufacturer and model names.

        type (Integer):
            Enum `VehicleType` (BUS, MINIBUS, VAN).

        year (Integer):
            Year of manufacture.

        capacity (Integer):
            Seating capacity.

        mileage (Integer):
            Odometer reading in kilometres.

        fuel_type (Integer):
            Enum `FuelType`.

        has_ac, has_wifi, has_usb, has_toilet (Boolean):
            On-board equipment.

        insurance_expiry_date, technical_visit_expiry_date,
        next_maintenance_date (Date):
            Nullable compliance dates.

        status (Integer):
            Operational status (ACTIVE, MAINTENANCE, INACTIVE).
            Defaults to `VehicleStatus.ACTIVE`.

        updated_on (DateTime), created_on (DateTime):
            Lifecycle timestamps.
    """

    __tablename__ = "vehicle"
    __table_args__ = (UniqueConstraint("registration_number", "company_id"),)

    id = Column(Integer, primary_key=True)
    company_id = Column(
        Integer,
        ForeignKey("company.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    station_id = Column(Integer, ForeignKey("station.id", ondelete="SET NULL"))
    registration_number = Column(String(16), nullable=False, index=True)
    brand = Column(String(32), nullable=False)
    model = Column(String(32), nullable=False)
    type = Column(Integer, nullable=False, default=VehicleType.BUS)
    year = Column(Integer)
    capacity = Column(Integer, nullable=False)
    mileage = Column(Integer, nullable=False, default=0)
    fuel_type = Column(Integer, nullable=False, default=FuelType.DIESEL)
    # Equipment
    has_ac = Column(Boolean, nullable=False, default=True)
    has_wifi = Column(Boolean, nullable=False, default=True)
    has_usb = Column(Boolean, nullable=False, default=True)
    has_toilet = Column(Boolean, nullable=False, default=False)
    # Compliance
    insurance_expiry_date = Column(Date)
    technical_visit_expiry_date = Column(Date)
    next_maintenance_date = Column(Date)
    status = Column(Integer, nullable=False, default=VehicleStatus.ACTIVE)
    # Metadata
    updated_on = Column(DateTime(timezone=True), onupdate=func.now())
    created_on = Column(DateTime(timezone=True), nullable=False, default=func.now())


class Staff(ORMbase):
    """
    Represents a staff member of a company. Drivers are staff members with
    the `StaffRole.DRIVER` role.

    The columns in the "driver" and "agent" groups are only meaningful for
    the corresponding roles and are left null (or false) otherwise.

    Columns:
        id (Integer):
            Primary key. Unique identifier for the staff member.

        company_id (Integer):
            Foreign key referencing the employing company.

        station_id (Integer):
            Optional station the staff member is attached to.

        role (Integer):
            Enum `StaffRole` (ADMIN, DRIVER, CASHIER, TICKET_CONTROLLER).

        first_name, last_name (String(32)):
            Name parts. Required.

        phone_number (TEXT):
            Contact phone number in RFC3966 format. Required.

        email_id (TEXT):
            Optional contact email address.

        address, city (TEXT):
            Optional postal details.

        join_date (Date):
            Hiring date. Defaults to the insertion date.

        license_number (String(32)), license_expiry_date (Date):
            Driving licence, required for drivers.

        assigned_vehicle_id (Integer):
            Vehicle assigned to a driver. Set to null when the vehicle is deleted.

        can_process_payments, can_scan_tickets, can_validate_manually (Boolean):
            Capabilities of cashiers and ticket controllers.

        status (Integer):
            Enum `StaffStatus`. Defaults to `StaffStatus.ACTIVE`.

        updated_on (DateTime), created_on (DateTime):
            Lifecycle timestamps.
    """

    __tablename__ = "staff"

    id = Column(Integer, primary_key=True)
    company_id = Column(
        Integer,
        ForeignKey("company.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    station_id = Column(Integer, ForeignKey("station.id", ondelete="SET NULL"))
    role = Column(Integer, nullable=False, default=StaffRole.DRIVER)
    first_name = Column(String(32), nullable=False)
    last_name = Column(String(32), nullable=False)
    # Contact details
    phone_number = Column(TEXT, nullable=False)
    email_id = Column(TEXT)
    address = Column(TEXT)
    city = Column(TEXT)
    join_date = Column(Date, nullable=False, default=func.current_date())
    # Driver details
    license_number = Column(String(32))
    license_expiry_date = Column(Date)
    assigned_vehicle_id = Column(Integer, ForeignKey("vehicle.id", ondelete="SET NULL"))
    # Agent details
    can_process_payments = Column(Boolean, nullable=False, default=False)
    can_scan_tickets = Column(Boolean, nullable=False, default=False)
    can_validate_manually = Column(Boolean, nullable=False, default=False)
    status = Column(Integer, nullable=False, default=StaffStatus.ACTIVE)
    # Metadata
    updated_on = Column(DateTime(timezone=True), onupdate=func.now())
    created_on = Column(DateTime(timezone=True), nullable=False, default=func.now())


# ----------------------------------- Platform DB Models --------------------------------------#
class User(ORMbase):
    """
    Represents a passenger account of the booking platform.

    Columns:
        id (Integer):
            Primary key. Unique identifier for the user.

        first_name, last_name (String(32)):
            Name parts. Required.

        phone_number (TEXT):
            Phone number in RFC3966 format. Required and unique.

        email_id (TEXT):
            Optional email address.

        total_bookings (Integer), total_spent (Numeric), loyalty_points (Integer):
            Read-only counters maintained by the booking platform.

        status (Integer):
            Enum `UserStatus`. Defaults to `UserStatus.ACTIVE`.

        updated_on (DateTime), created_on (DateTime):
            Lifecycle timestamps.
    """

    __tablename__ = "user"

    id = Column(Integer, primary_key=True)
    first_name = Column(String(32), nullable=False)
    last_name = Column(String(32), nullable=False)
    phone_number = Column(TEXT, nullable=False, unique=True)
    email_id = Column(TEXT)
    total_bookings = Column(Integer, nullable=False, default=0)
    total_spent = Column(Numeric(12, 2), nullable=False, default=0)
    loyalty_points = Column(Integer, nullable=False, default=0)
    status = Column(Integer, nullable=False, default=UserStatus.ACTIVE)
    # Metadata
    updated_on = Column(DateTime(timezone=True), onupdate=func.now())
    created_on = Column(DateTime(timezone=True), nullable=False, default=func.now())


class Complaint(ORMbase):
    """
    Represents a complaint filed by a user about a trip, a station or a driver.

    Priority is an axis independent from the status: a complaint of any
    priority moves through PENDING, IN_PROGRESS and RESOLVED.
    RESOLVED is terminal and stamps `resolved_on`.
    """

    __tablename__ = "complaint"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="SET NULL"), index=True)
    station_id = Column(Integer, ForeignKey("station.id", ondelete="SET NULL"))
    driver_id = Column(Integer, ForeignKey("staff.id", ondelete="SET NULL"))
    type = Column(Integer, nullable=False, default=ComplaintType.OTHER)
    priority = Column(Integer, nullable=False, default=ComplaintPriority.MEDIUM)
    subject = Column(String(128), nullable=False)
    description = Column(TEXT, nullable=False)
    status = Column(Integer, nullable=False, default=ComplaintStatus.PENDING)
    resolved_on = Column(DateTime(timezone=True))
    # Metadata
    updated_on = Column(DateTime(timezone=True), onupdate=func.now())
    created_on = Column(DateTime(timezone=True), nullable=False, default=func.now())


class Promotion(ORMbase):
    """
    Represents a discount campaign valid between two dates on a set of stations.

    The status is stored, not derived from the dates. The expiry job
    (`backoffice.src.expirer`) moves promotions past their `end_date`
    to EXPIRED.

    Columns:
        discount_type (Integer):
            Enum `DiscountType` (PERCENTAGE, FIXED).

        discount_value (Numeric):
            Percentage (0 < value <= 100) or fixed amount (> 0).

        start_date, end_date (Date):
            Validity window, inclusive. `end_date` is never before `start_date`.

        station_ids (JSON):
            Stations where the promotion applies. Empty means every station.

        minimum_amount, max_discount (Numeric), usage_limit (Integer):
            Optional restrictions.

        usage_count (Integer):
            Number of times the promotion was redeemed.

        status (Integer):
            Enum `PromotionStatus`. Defaults to `PromotionStatus.SCHEDULED`.
    """

    __tablename__ = "promotion"

    id = Column(Integer, primary_key=True)
    title = Column(String(128), nullable=False)
    description = Column(TEXT, nullable=False, default="")
    discount_type = Column(Integer, nullable=False, default=DiscountType.PERCENTAGE)
    discount_value = Column(Numeric(12, 2), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False, index=True)
    station_ids = Column(JSON, nullable=False, default=list)
    minimum_amount = Column(Numeric(12, 2))
    max_discount = Column(Numeric(12, 2))
    usage_limit = Column(Integer)
    usage_count = Column(Integer, nullable=False, default=0)
    status = Column(Integer, nullable=False, default=PromotionStatus.SCHEDULED)
    # Metadata
    updated_on = Column(DateTime(timezone=True), onupdate=func.now())
    created_on = Column(DateTime(timezone=True), nullable=False, default=func.now())
