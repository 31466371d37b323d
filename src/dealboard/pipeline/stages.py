"""Stage registry -- the fixed, ordered set of deal pipeline stages.

Defines DealStage (the 12 stage identifiers) and the immutable display
metadata the board renders for each column. Order matters: STAGE_ORDER is
the left-to-right column order and the reference for move direction.

contract_signed and lost are terminal in intent (they trigger date stamping
in transitions.py) but a deal may still be moved out of them.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict


class DealStage(str, Enum):
    """Pipeline stage of a deal."""

    NEW_OPPORTUNITY = "new_opportunity"
    DISCOVERY_CALL_SCHEDULED = "discovery_call_scheduled"
    DISCOVERY_CALL_COMPLETED = "discovery_call_completed"
    PROPOSAL_PREPARATION = "proposal_preparation"
    PROPOSAL_SENT = "proposal_sent"
    PROPOSAL_REVIEW = "proposal_review"
    NEGOTIATION = "negotiation"
    CONTRACT_SENT = "contract_sent"
    CONTRACT_SIGNED = "contract_signed"
    PROJECT_KICKOFF = "project_kickoff"
    ON_HOLD = "on_hold"
    LOST = "lost"


WON_STAGE = DealStage.CONTRACT_SIGNED
LOST_STAGE = DealStage.LOST

# Stages outside the forward progression.
EXCEPTION_STAGES: frozenset[DealStage] = frozenset({DealStage.ON_HOLD, DealStage.LOST})


class StageDefinition(BaseModel):
    """Display metadata for one pipeline column."""

    model_config = ConfigDict(frozen=True)

    id: DealStage
    label: str
    color: str
    description: str


# ── Registry ────────────────────────────────────────────────────────────────

STAGE_DEFINITIONS: tuple[StageDefinition, ...] = (
    StageDefinition(
        id=DealStage.NEW_OPPORTUNITY,
        label="New Opportunity",
        color="bg-blue-500",
        description="Lead converted to active opportunity",
    ),
    StageDefinition(
        id=DealStage.DISCOVERY_CALL_SCHEDULED,
        label="Discovery Scheduled",
        color="bg-cyan-500",
        description="Initial consultation booked",
    ),
    StageDefinition(
        id=DealStage.DISCOVERY_CALL_COMPLETED,
        label="Discovery Completed",
        color="bg-teal-500",
        description="Needs assessment finished",
    ),
    StageDefinition(
        id=DealStage.PROPOSAL_PREPARATION,
        label="Proposal Prep",
        color="bg-indigo-500",
        description="Creating custom proposal",
    ),
    StageDefinition(
        id=DealStage.PROPOSAL_SENT,
        label="Proposal Sent",
        color="bg-purple-500",
        description="Proposal delivered to prospect",
    ),
    StageDefinition(
        id=DealStage.PROPOSAL_REVIEW,
        label="Proposal Review",
        color="bg-pink-500",
        description="Client reviewing proposal",
    ),
    StageDefinition(
        id=DealStage.NEGOTIATION,
        label="Negotiation",
        color="bg-orange-500",
        description="Discussing terms and pricing",
    ),
    StageDefinition(
        id=DealStage.CONTRACT_SENT,
        label="Contract Sent",
        color="bg-yellow-500",
        description="Legal documents sent",
    ),
    StageDefinition(
        id=DealStage.CONTRACT_SIGNED,
        label="Contract Signed",
        color="bg-green-500",
        description="Deal closed won",
    ),
    StageDefinition(
        id=DealStage.PROJECT_KICKOFF,
        label="Project Kickoff",
        color="bg-emerald-500",
        description="Implementation started",
    ),
    StageDefinition(
        id=DealStage.ON_HOLD,
        label="On Hold",
        color="bg-gray-500",
        description="Deal temporarily paused",
    ),
    StageDefinition(
        id=DealStage.LOST,
        label="Lost",
        color="bg-red-500",
        description="Deal closed lost",
    ),
)

STAGE_ORDER: tuple[DealStage, ...] = tuple(d.id for d in STAGE_DEFINITIONS)

# Keyed by the raw string value so lookups accept either DealStage or str.
STAGE_REGISTRY: MappingProxyType[str, StageDefinition] = MappingProxyType(
    {d.id.value: d for d in STAGE_DEFINITIONS}
)

_STAGE_INDEX: dict[str, int] = {stage.value: idx for idx, stage in enumerate(STAGE_ORDER)}


def _key(stage: DealStage | str) -> str:
    return stage.value if isinstance(stage, DealStage) else stage


def get_stage_definition(stage: DealStage | str) -> StageDefinition | None:
    """Look up display metadata for a stage; None for unregistered ids."""
    return STAGE_REGISTRY.get(_key(stage))


def stage_index(stage: DealStage | str) -> int | None:
    """Position of a stage in STAGE_ORDER, or None if unregistered."""
    return _STAGE_INDEX.get(_key(stage))


def is_registered_stage(stage: DealStage | str) -> bool:
    return _key(stage) in _STAGE_INDEX
