from fastapi import APIRouter
from portal_jai1.api.v1 import admin, profiles

api_router = APIRouter()

api_router.include_router(profiles.router, prefix="/profiles", tags=["profiles"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
