"""Authorization roles and post-login destinations."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Mapping, Optional, Union

from loguru import logger


class UserRole(Enum):
    """Closed set of authorization roles, least privileged first."""

    USER = "user"
    ADMIN = "admin"
    LEADER = "leader"
    GERENCIADOR = "gerenciador"


LEAST_PRIVILEGED_ROLE = UserRole.USER


def parse_role(raw: Optional[str], aliases: Optional[Mapping[str, str]] = None) -> Optional[UserRole]:
    """Map a stored role string onto the closed set.

    The stored value is trimmed and lowercased, then passed through
    ``aliases`` once. Returns None when the result is not a known role.
    """
    if raw is None:
        return None

    key = str(raw).strip().lower()
    if aliases:
        key = aliases.get(key, key)

    try:
        return UserRole(key)
    except ValueError:
        return None


class RoleRouter:
    """Fixed role-to-destination table with a least-privileged fallback."""

    def __init__(self, destinations: Mapping[str, str], aliases: Optional[Mapping[str, str]] = None):
        """Initialize the router.

        Args:
            destinations: Role value -> application URL; must contain ``user``
            aliases: Stored role string -> role value, applied before matching
        """
        if LEAST_PRIVILEGED_ROLE.value not in destinations:
            raise ValueError(f"A destination for the '{LEAST_PRIVILEGED_ROLE.value}' role is required")
        self.destinations: Dict[str, str] = dict(destinations)
        self.aliases: Dict[str, str] = {k.lower(): v.lower() for k, v in (aliases or {}).items()}

    def resolve_role(self, raw: Optional[str]) -> UserRole:
        """Resolve a stored role string, falling back to the least-privileged role."""
        role = parse_role(raw, self.aliases)
        if role is None:
            if raw is not None:
                logger.warning(f"Unknown role {raw!r}, using '{LEAST_PRIVILEGED_ROLE.value}'")
            return LEAST_PRIVILEGED_ROLE
        return role

    def destination_for(self, role: Union[UserRole, str, None]) -> str:
        """Exact match in the table, else the least-privileged destination."""
        key = role.value if isinstance(role, UserRole) else role
        if key in self.destinations:
            return self.destinations[key]
        return self.destinations[LEAST_PRIVILEGED_ROLE.value]


def create_role_router(config) -> RoleRouter:
    """Create a router from a PortalConfig."""
    return RoleRouter(config.destinations, config.role_aliases)
