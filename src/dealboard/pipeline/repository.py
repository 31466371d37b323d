"""Deal repository boundary and its in-memory implementation.

DealRepository is the narrow interface the pipeline service talks to; a
hosted database or CRM backend implements it. The pipeline core never
writes to the store itself -- the service hands the repository the merged
field updates produced by the transition handler.

InMemoryDealRepository keeps deals in a dict and is what the application
installs by default (development) and what the tests use. Concurrent
updates to the same deal are last-write-wins.
"""

from __future__ import annotations

import asyncio
import uuid
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

import structlog

from dealboard.pipeline.schemas import Deal, DealCreate, LeadSummary, as_utc

logger = structlog.get_logger(__name__)


class DealNotFoundError(LookupError):
    """Raised when an operation targets a deal id the repository does not hold."""

    def __init__(self, deal_id: str) -> None:
        self.deal_id = deal_id
        super().__init__(f"Deal not found: {deal_id}")


class DealRepository(ABC):
    """Abstract interface for deal storage.

    Methods:
        fetch_all: All deals, newest first.
        get: One deal by id, or None.
        create: Persist a new deal and return it.
        update: Apply a partial field dict, stamp updated_at, return the deal.
        delete: Remove a deal.
    """

    @abstractmethod
    async def fetch_all(self) -> list[Deal]:
        """Return every deal, ordered by created_at descending."""
        ...

    @abstractmethod
    async def get(self, deal_id: str) -> Deal | None:
        """Fetch a deal by id."""
        ...

    @abstractmethod
    async def create(self, data: DealCreate, lead: LeadSummary | None = None) -> Deal:
        """Create a deal, optionally joined to its originating lead."""
        ...

    @abstractmethod
    async def update(self, deal_id: str, fields: dict[str, Any]) -> Deal:
        """Apply ``fields`` to a deal. Raises DealNotFoundError."""
        ...

    @abstractmethod
    async def delete(self, deal_id: str) -> None:
        """Delete a deal. Raises DealNotFoundError."""
        ...


class InMemoryDealRepository(DealRepository):
    """Dict-backed DealRepository.

    Args:
        deals: Optional initial deals (e.g. demo seed data).
    """

    def __init__(self, deals: Iterable[Deal] | None = None) -> None:
        self._deals: dict[str, Deal] = {}
        self._lock = asyncio.Lock()
        for deal in deals or ():
            self._deals[deal.id] = deal

    def __len__(self) -> int:
        return len(self._deals)

    async def fetch_all(self) -> list[Deal]:
        return sorted(self._deals.values(), key=lambda d: as_utc(d.created_at), reverse=True)

    async def get(self, deal_id: str) -> Deal | None:
        return self._deals.get(deal_id)

    async def create(self, data: DealCreate, lead: LeadSummary | None = None) -> Deal:
        now = datetime.now(timezone.utc)
        payload = data.model_dump(mode="json")
        deal = Deal.model_validate(
            {
                **payload,
                "id": str(uuid.uuid4()),
                "lead": lead.model_dump() if lead is not None else None,
                "created_at": now,
                "updated_at": now,
            }
        )
        async with self._lock:
            self._deals[deal.id] = deal
        logger.debug("deal_created", deal_id=deal.id, stage=deal.stage)
        return deal

    async def update(self, deal_id: str, fields: dict[str, Any]) -> Deal:
        async with self._lock:
            current = self._deals.get(deal_id)
            if current is None:
                raise DealNotFoundError(deal_id)

            merged = {
                **current.model_dump(),
                **fields,
                "updated_at": datetime.now(timezone.utc),
            }
            updated = Deal.model_validate(merged)
            self._deals[deal_id] = updated
        logger.debug("deal_updated", deal_id=deal_id, fields=sorted(fields))
        return updated

    async def delete(self, deal_id: str) -> None:
        async with self._lock:
            if self._deals.pop(deal_id, None) is None:
                raise DealNotFoundError(deal_id)
        logger.debug("deal_deleted", deal_id=deal_id)
