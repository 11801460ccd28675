"""Commit state machine with transition validation."""

from __future__ import annotations

import logging
from enum import Enum
from uuid import UUID

logger = logging.getLogger(__name__)


class CommitStage(str, Enum):
    """Stages of a single payroll commit."""

    NOT_STARTED = "not_started"
    CHECKING_DUPLICATE = "checking_duplicate"
    FETCHING_EMPLOYEES = "fetching_employees"
    CALCULATING = "calculating"
    PERSISTING = "persisting"
    UPDATING_SCHEDULE = "updating_schedule"
    AUDITING = "auditing"
    DONE = "done"
    REJECTED = "rejected"
    FAILED = "failed"


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_stage: str, to_stage: str, reason: str | None = None):
        self.from_stage = from_stage
        self.to_stage = to_stage
        self.reason = reason
        msg = f"Invalid transition from '{from_stage}' to '{to_stage}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class CommitStateMachine:
    """Tracks one commit through its stages.

    Allowed transitions:
    - not_started → checking_duplicate
    - checking_duplicate → fetching_employees | rejected
    - fetching_employees → calculating | rejected
    - calculating → persisting
    - persisting → updating_schedule | failed
    - updating_schedule → auditing
    - auditing → done

    Everything up to and including persisting leaves no durable change when
    it ends in rejected/failed. From updating_schedule on the run exists.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        CommitStage.NOT_STARTED: [CommitStage.CHECKING_DUPLICATE],
        CommitStage.CHECKING_DUPLICATE: [
            CommitStage.FETCHING_EMPLOYEES,
            CommitStage.REJECTED,
        ],
        CommitStage.FETCHING_EMPLOYEES: [CommitStage.CALCULATING, CommitStage.REJECTED],
        CommitStage.CALCULATING: [CommitStage.PERSISTING],
        CommitStage.PERSISTING: [CommitStage.UPDATING_SCHEDULE, CommitStage.FAILED],
        CommitStage.UPDATING_SCHEDULE: [CommitStage.AUDITING],
        CommitStage.AUDITING: [CommitStage.DONE],
        CommitStage.DONE: [],
        CommitStage.REJECTED: [],
        CommitStage.FAILED: [],
    }

    TERMINAL = {CommitStage.DONE, CommitStage.REJECTED, CommitStage.FAILED}

    # Stages reached only after the run record is durable
    COMMITTED = {CommitStage.UPDATING_SCHEDULE, CommitStage.AUDITING, CommitStage.DONE}

    def __init__(self, organization_id: UUID, idempotency_key: str):
        self.organization_id = organization_id
        self.idempotency_key = idempotency_key
        self.stage = CommitStage.NOT_STARTED
        self.history: list[CommitStage] = [self.stage]

    @classmethod
    def can_transition(cls, from_stage: str, to_stage: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_stage, [])
        return to_stage in allowed

    @classmethod
    def get_next_stages(cls, current_stage: str) -> list[str]:
        """Get list of valid next stages from current stage."""
        return cls.VALID_TRANSITIONS.get(current_stage, [])

    @property
    def is_terminal(self) -> bool:
        return self.stage in self.TERMINAL

    @property
    def is_committed(self) -> bool:
        """True once the run record has been written."""
        return self.stage in self.COMMITTED

    def advance(self, to_stage: CommitStage, reason: str | None = None) -> None:
        """Move to the next stage, raising InvalidTransitionError if not allowed."""
        if not self.can_transition(self.stage, to_stage):
            raise InvalidTransitionError(self.stage.value, to_stage.value, reason)

        logger.debug(
            "payroll commit %s: %s -> %s%s",
            self.idempotency_key,
            self.stage.value,
            to_stage.value,
            f" ({reason})" if reason else "",
        )
        self.stage = to_stage
        self.history.append(to_stage)
