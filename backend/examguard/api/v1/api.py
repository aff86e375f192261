from fastapi import APIRouter

from .endpoints import exams, health

api_router = APIRouter()

api_router.include_router(exams.router, prefix="/exams", tags=["exams"])
api_router.include_router(health.router, prefix="/health", tags=["health"])
