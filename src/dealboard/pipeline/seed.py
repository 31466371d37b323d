"""Demo deals for local development.

Loaded into the in-memory repository on startup when SEED_DEMO_DEALS is set.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

from dealboard.pipeline.schemas import Deal, LeadSummary, ServiceType
from dealboard.pipeline.stages import DealStage

# (name, value, probability, stage, service type, source, days ago)
_DEMO_ROWS: list[tuple[str, float, int, DealStage, ServiceType, str, int]] = [
    ("Northwind CRM rollout", 42_000, 20, DealStage.NEW_OPPORTUNITY, ServiceType.CRM_IMPLEMENTATION, "referral", 3),
    ("Contoso growth retainer", 18_500, 35, DealStage.DISCOVERY_CALL_SCHEDULED, ServiceType.GROWTH_CREATOR, "inbound", 9),
    ("Fabrikam AI content engine", 95_000, 50, DealStage.PROPOSAL_SENT, ServiceType.AIGC_SYSTEMS, "outbound", 21),
    ("Tailspin ops audit", 12_000, 70, DealStage.NEGOTIATION, ServiceType.SYSTEM_OPTIMIZATION, "inbound", 34),
    ("Litware support plan", 8_400, 100, DealStage.CONTRACT_SIGNED, ServiceType.ONGOING_SUPPORT, "referral", 48),
    ("Adatum strategy sprint", 27_000, 0, DealStage.LOST, ServiceType.BUSINESS_CONSULTING, "event", 60),
]


def demo_deals(now: datetime | None = None) -> list[Deal]:
    """Build the demo deal set relative to ``now``."""
    now = now or datetime.now(timezone.utc)
    deals: list[Deal] = []
    for name, value, prob, stage, service, source, days_ago in _DEMO_ROWS:
        created = now - timedelta(days=days_ago)
        company = name.split()[0]
        deal = Deal(
            id=str(uuid.uuid4()),
            deal_name=name,
            deal_value=value,
            probability=prob,
            stage=stage.value,
            service_type=service.value,
            deal_source=source,
            lead=LeadSummary(id=str(uuid.uuid4()), company=company),
            created_at=created,
            updated_at=created,
        )
        if stage == DealStage.CONTRACT_SIGNED:
            closed = created + timedelta(days=30)
            deal = deal.model_copy(update={"won_date": closed, "actual_close_date": closed})
        elif stage == DealStage.LOST:
            deal = deal.model_copy(update={"lost_date": created + timedelta(days=14)})
        deal = deal.model_copy(update={"lead_id": deal.lead.id})
        deals.append(deal)
    return deals
