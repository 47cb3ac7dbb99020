from fastapi import APIRouter

from . import employees, scheduling, shifts, system

api_router = APIRouter()

api_router.include_router(system.router, prefix="/system", tags=["system"])
api_router.include_router(employees.router, prefix="/employees", tags=["employees"])
api_router.include_router(shifts.router, prefix="/shifts", tags=["shifts"])
api_router.include_router(scheduling.router, prefix="/scheduling", tags=["scheduling"])
