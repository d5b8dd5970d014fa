"""Authorization roles and role-based routing."""

from .destinations import LEAST_PRIVILEGED_ROLE, RoleRouter, UserRole, create_role_router, parse_role

__all__ = ["LEAST_PRIVILEGED_ROLE", "RoleRouter", "UserRole", "create_role_router", "parse_role"]
