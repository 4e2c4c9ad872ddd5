from fastapi import APIRouter

from hrdesk.api.balances import employee_balance_router
from hrdesk.api.employees import employees_router
from hrdesk.api.leave_types import leave_types_router
from hrdesk.api.notifications import notifications_router
from hrdesk.api.requests import requests_router

api_router = APIRouter()
api_router.include_router(leave_types_router)
api_router.include_router(employee_balance_router)
api_router.include_router(employees_router)
api_router.include_router(requests_router)
api_router.include_router(notifications_router)
