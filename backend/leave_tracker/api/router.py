from fastapi import APIRouter

from leave_tracker.api.applications import applications_router
from leave_tracker.api.balances import balance_rebuild_router, employee_balance_router
from leave_tracker.api.policies import calendar_router, policies_router

api_router = APIRouter()
api_router.include_router(policies_router)
api_router.include_router(calendar_router)
api_router.include_router(applications_router)
api_router.include_router(employee_balance_router)
api_router.include_router(balance_rebuild_router)
