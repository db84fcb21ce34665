"""Aggregates all API routers."""
from fastapi import APIRouter
from nested_students.api.students import router as students_router

router = APIRouter()
router.include_router(students_router)
