"""Shared fixtures for pipeline tests.

Provides:
- make_deal: factory for Deal records with sensible defaults
- repo: empty InMemoryDealRepository
- service: PipelineService bound to ``repo``
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import pytest

from dealboard.pipeline.repository import InMemoryDealRepository
from dealboard.pipeline.schemas import Deal
from dealboard.pipeline.service import PipelineService

BASE_TIME = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_deal() -> Callable[..., Deal]:
    """Factory building a Deal; any field can be overridden by keyword."""

    def _make(**overrides: Any) -> Deal:
        fields: dict[str, Any] = {
            "id": str(uuid.uuid4()),
            "deal_name": "Test Deal",
            "deal_value": 10000.0,
            "probability": 50,
            "stage": "new_opportunity",
            "created_at": BASE_TIME,
            "updated_at": BASE_TIME,
        }
        fields.update(overrides)
        return Deal(**fields)

    return _make


@pytest.fixture
def repo() -> InMemoryDealRepository:
    return InMemoryDealRepository()


@pytest.fixture
def service(repo: InMemoryDealRepository) -> PipelineService:
    return PipelineService(repo)
