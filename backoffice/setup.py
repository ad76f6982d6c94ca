import argparse
from http import HTTPStatus
from requests import post
from datetime import date, timedelta

from backoffice.src.constants import BACKOFFICE_API_URL, CLIENT_TIMEOUT
from backoffice.src.enums import (
    Action,
    CompanyStatus,
    ComplaintPriority,
    ComplaintType,
    DiscountType,
    FuelType,
    StaffRole,
    VehicleType,
)
from backoffice.src.urls import (
    URL_ACTION,
    URL_COMPANY,
    URL_COMPLAINT,
    URL_PROMOTION,
    URL_STAFF,
    URL_STATION,
    URL_USER,
    URL_VEHICLE,
)
from backoffice.src.db import Company, sessionMaker, engine, ORMbase


# ----------------------------------- Project Setup -------------------------------------------#
def removeTables():
    ORMbase.metadata.drop_all(engine)
    print("* All tables deleted")


def createTables():
    ORMbase.metadata.create_all(engine)
    print("* All tables created")


def initDB():
    session = sessionMaker()
    company = Company(
        name="AfriCar Transport",
        status=CompanyStatus.ACTIVE,
        address="Boulevard de la République, Plateau, Abidjan",
        phone_number="+2252720212223",
        email_id="contact@africar.ci",
    )
    session.add(company)
    session.commit()
    print("* Initialization completed")
    session.close()


def POST(URL: str, status_code: int = HTTPStatus.CREATED, **kwargs):
    response = post(URL, timeout=CLIENT_TIMEOUT, **kwargs)
    assert response.status_code == status_code, response.text
    return response


def testDB():
    BASE_URL = BACKOFFICE_API_URL

    # Create Company
    companyData = {
        "name": "Test company",
        "address": "Rue des Jardins, Cocody, Abidjan",
        "phone_number": "+2250707080910",
        "email_id": "example@test.ci",
    }
    company = POST(BASE_URL + URL_COMPANY, json=companyData)
    companyId = company.json()["id"]
    print("* Created company")

    # Create Stations
    stations = []
    for stationData in [
        {
            "name": "Gare d'Adjamé",
            "city": "Abidjan",
            "address": "Boulevard Nangui Abrogoua, Adjamé",
            "capacity": 80,
            "latitude": "5.3599",
            "longitude": "-4.0083",
            "is_main_station": True,
        },
        {
            "name": "Gare de Yamoussoukro",
            "city": "Yamoussoukro",
            "address": "Avenue Houphouët-Boigny",
            "capacity": 40,
            "latitude": "6.8276",
            "longitude": "-5.2893",
        },
        {
            "name": "Gare de Bouaké",
            "city": "Bouaké",
            "address": "Quartier Commerce",
            "capacity": 50,
            "latitude": "7.6906",
            "longitude": "-5.0301",
            "has_waiting_room": False,
        },
    ]:
        response = POST(
            BASE_URL + URL_STATION.format(company_id=companyId), json=stationData
        )
        stations.append(response.json())
    print("* Created stations")

    # Create Vehicles
    vehicleData = {
        "station_id": stations[0]["id"],
        "registration_number": "AB-1234-CI",
        "brand": "Mercedes-Benz",
        "model": "Tourismo",
        "type": VehicleType.BUS,
        "year": 2019,
        "capacity": 54,
        "mileage": 125000,
        "fuel_type": FuelType.DIESEL,
        "has_toilet": True,
        "next_maintenance_date": str(date.today() + timedelta(days=30)),
    }
    vehicle = POST(
        BASE_URL + URL_VEHICLE.format(company_id=companyId), json=vehicleData
    )
    minibusData = {
        "station_id": stations[1]["id"],
        "registration_number": "CD-5678-CI",
        "brand": "Toyota",
        "model": "Coaster",
        "type": VehicleType.MINIBUS,
        "year": 2016,
        "capacity": 30,
        "has_wifi": False,
    }
    POST(BASE_URL + URL_VEHICLE.format(company_id=companyId), json=minibusData)
    print("* Created vehicles")

    # Create Staff
    driverData = {
        "station_id": stations[0]["id"],
        "role": StaffRole.DRIVER,
        "first_name": "Kouassi",
        "last_name": "Yao",
        "phone_number": "+2250101020304",
        "license_number": "CI-2018-004512",
        "license_expiry_date": str(date.today() + timedelta(days=700)),
        "assigned_vehicle_id": vehicle.json()["id"],
    }
    driver = POST(BASE_URL + URL_STAFF.format(company_id=companyId), json=driverData)
    cashierData = {
        "station_id": stations[0]["id"],
        "role": StaffRole.CASHIER,
        "first_name": "Aminata",
        "last_name": "Traoré",
        "phone_number": "+2250505060708",
        "can_process_payments": True,
    }
    POST(BASE_URL + URL_STAFF.format(company_id=companyId), json=cashierData)
    print("* Created staff")

    # Create User
    userData = {
        "first_name": "Fatou",
        "last_name": "Diallo",
        "phone_number": "+2250708091011",
        "email_id": "fatou.diallo@test.ci",
    }
    user = POST(BASE_URL + URL_USER, json=userData)
    print("* Created user")

    # Create Complaint
    complaintData = {
        "user_id": user.json()["id"],
        "station_id": stations[0]["id"],
        "driver_id": driver.json()["id"],
        "type": ComplaintType.DELAY,
        "priority": ComplaintPriority.HIGH,
        "subject": "Départ retardé",
        "description": "Le bus de 8h pour Yamoussoukro est parti avec une heure de retard.",
    }
    POST(BASE_URL + URL_COMPLAINT, json=complaintData)
    print("* Created complaint")

    # Create Promotions
    promotionData = {
        "title": "Rentrée scolaire",
        "description": "Réduction pour les étudiants",
        "discount_type": DiscountType.PERCENTAGE,
        "discount_value": 15,
        "start_date": str(date.today()),
        "end_date": str(date.today() + timedelta(days=30)),
        "station_ids": [station["id"] for station in stations],
        "usage_limit": 500,
    }
    promotion = POST(BASE_URL + URL_PROMOTION, json=promotionData)
    POST(
        BASE_URL + URL_PROMOTION + URL_ACTION,
        json={"id": promotion.json()["id"], "action": Action.ACTIVATE},
        status_code=HTTPStatus.OK,
    )
    print("* Created promotion")


# Setup database
if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    # remove tables
    parser.add_argument("-rm", action="store_true", help="remove tables")
    parser.add_argument("-cr", action="store_true", help="create tables")
    parser.add_argument("-init", action="store_true", help="initialize DB")
    parser.add_argument("-test", action="store_true", help="add test data")
    args = parser.parse_args()

    if args.cr:
        createTables()
    if args.init:
        initDB()
    if args.test:
        testDB()
    if args.rm:
        removeTables()
