"""Explicit per-request context passed into every payroll operation."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class Actor:
    """The user on whose behalf an operation runs."""

    id: UUID
    name: str


@dataclass(frozen=True)
class OrgContext:
    """Organization scope plus acting user.

    Tenant scoping is the caller's job; the payroll core trusts the
    organization id it is given.
    """

    organization_id: UUID
    actor: Actor
