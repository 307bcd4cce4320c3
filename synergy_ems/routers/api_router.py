from fastapi import APIRouter
from synergy_ems.routers import employees, holidays, leave, leave_manager

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(employees.router, tags=["Employees"])
api_router.include_router(leave.router, tags=["Leave"])
api_router.include_router(leave_manager.router, tags=["Leave Manager"])
api_router.include_router(holidays.router, tags=["Holidays"])
