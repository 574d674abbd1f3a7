"""
API v1 package.

Contains versioned API routes for local accounts and phone enrollment.
"""

from fastapi import APIRouter

from src.api.v1.enrollment_routes import router as enrollment_router
from src.api.v1.routes import router as account_router

router = APIRouter()
router.include_router(account_router)
router.include_router(enrollment_router)

__all__ = ["router"]
