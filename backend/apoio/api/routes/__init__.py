from fastapi import APIRouter

from apoio.api.routes import accounts, dashboard, health, payments, profile, webhooks

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(payments.router, tags=["payments"])
api_router.include_router(webhooks.router, tags=["webhooks"])
api_router.include_router(accounts.router, tags=["accounts"])
api_router.include_router(dashboard.router, tags=["dashboard"])
api_router.include_router(profile.router, prefix="/me", tags=["profile"])
