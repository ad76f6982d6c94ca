from fastapi import FastAPI
from backoffice.api import (
    company,
    station,
    staff,
    vehicle,
    complaint,
    promotion,
    user,
    catalog,
)
from backoffice.src.enums import AppID


# ------------------------------------------------------
# Back-office application
# ------------------------------------------------------
app_admin = FastAPI(title="Admin APP")

# Tag the app with its AppID
app_admin.state.id = AppID.ADMIN


# ------------------------------------------------------
# Company scoped routers
# ------------------------------------------------------
app_admin.include_router(company.route_admin)
app_admin.include_router(station.route_admin)
app_admin.include_router(staff.route_admin)
app_admin.include_router(vehicle.route_admin)

# Platform wide routers
app_admin.include_router(complaint.route_admin)
app_admin.include_router(promotion.route_admin)
app_admin.include_router(user.route_admin)
app_admin.include_router(catalog.route_admin)
