"""V1 API router -- aggregates all v1 endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from dealboard.api.v1 import deals, health, pipeline

API_PREFIX = "/api/v1"

router = APIRouter()

router.include_router(health.router)
router.include_router(pipeline.router, prefix=API_PREFIX)
router.include_router(deals.router, prefix=API_PREFIX)
