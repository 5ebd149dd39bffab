from fastapi import APIRouter

from app.api.issuers import router as issuers_router
from app.api.offers import router as offers_router
from app.api.products import router as products_router
from app.api.snapshots import router as snapshots_router
from app.api.subscribers import router as subscribers_router
from app.api.valuations import router as valuations_router

api_router = APIRouter()

# API routes at /api/*
api_router.include_router(offers_router, prefix="/api", tags=["offers"])
api_router.include_router(snapshots_router, prefix="/api", tags=["snapshots"])
api_router.include_router(issuers_router, prefix="/api", tags=["issuers"])
api_router.include_router(products_router, prefix="/api", tags=["products"])
api_router.include_router(valuations_router, prefix="/api", tags=["valuations"])
api_router.include_router(subscribers_router, prefix="/api", tags=["subscribers"])
