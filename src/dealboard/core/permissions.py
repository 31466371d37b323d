"""Role-based section permissions.

A fixed role -> section table. Missing or unknown roles get no access.
"""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    USER = "User"
    FINANCE = "Finance"
    ADMIN = "Admin"


class Section(str, Enum):
    """Dashboard sections a role may open."""

    DASHBOARD = "dashboard"
    LEADS = "leads"
    SALES = "sales"
    DOCUMENTS = "documents"
    OPERATIONS = "operations"
    STRATEGY = "strategy"
    TOOLS = "tools"
    FINANCES = "finances"
    TEAM = "team"
    OFFER = "offer"
    PAYMENT = "payment"


_BASE_SECTIONS = frozenset(
    {
        Section.DASHBOARD,
        Section.LEADS,
        Section.SALES,
        Section.DOCUMENTS,
        Section.OPERATIONS,
        Section.STRATEGY,
        Section.TOOLS,
    }
)

ROLE_PERMISSIONS: dict[UserRole, frozenset[Section]] = {
    UserRole.USER: _BASE_SECTIONS,
    UserRole.FINANCE: _BASE_SECTIONS | {Section.FINANCES, Section.TEAM},
    UserRole.ADMIN: frozenset(Section),
}


def parse_role(value: str | None) -> UserRole | None:
    """Map a raw role string to UserRole; None when missing or unknown."""
    if not value:
        return None
    try:
        return UserRole(value)
    except ValueError:
        return None


def has_permission(role: UserRole | None, section: Section) -> bool:
    if role is None:
        return False
    return section in ROLE_PERMISSIONS.get(role, frozenset())


def get_user_permissions(role: UserRole | None) -> dict[str, bool]:
    """Full section -> allowed map for a role (all False when role is None)."""
    return {section.value: has_permission(role, section) for section in Section}
