from fastapi import APIRouter

from rota.api.changes import changes_router, staff_changes_router
from rota.api.entitlements import entitlements_router, staff_entitlement_router
from rota.api.holiday_year import holiday_year_router
from rota.api.maintenance import maintenance_router
from rota.api.rota import shifts_router, staff_router

api_router = APIRouter()
api_router.include_router(holiday_year_router)
api_router.include_router(entitlements_router)
api_router.include_router(staff_router)
api_router.include_router(staff_entitlement_router)
api_router.include_router(staff_changes_router)
api_router.include_router(changes_router)
api_router.include_router(shifts_router)
api_router.include_router(maintenance_router)
