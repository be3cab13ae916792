from fastapi import APIRouter

from vacation_scheduler.api.allotments import allotments_router, employee_allotments_router
from vacation_scheduler.api.employees import employees_router
from vacation_scheduler.api.ranges import allotment_ranges_router, ranges_router
from vacation_scheduler.api.reschedules import reschedules_router

api_router = APIRouter()
api_router.include_router(employees_router)
api_router.include_router(employee_allotments_router)
api_router.include_router(allotments_router)
api_router.include_router(allotment_ranges_router)
api_router.include_router(ranges_router)
api_router.include_router(reschedules_router)
