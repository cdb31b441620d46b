"""API routes."""

from fastapi import APIRouter

from civictrack.api import admin, auth, health, issues

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(issues.router, prefix="/issues", tags=["issues"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
