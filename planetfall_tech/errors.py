"""Errors raised by the technology subsystem."""

from enum import Enum


class ContentErrorKind(Enum):
    DUPLICATE_ID = "duplicate id"
    DANGLING_PREREQUISITE = "unknown prerequisite"
    INVALID_DURATION = "research duration must be positive"
    PREREQUISITE_CYCLE = "prerequisite cycle"
    NEGATIVE_COST = "negative research cost"
    INVALID_TIER = "tier must be positive"
    UNKNOWN_EFFECT_KIND = "unknown effect kind"
    MALFORMED = "malformed entry"


class ContentError(Exception):
    """A malformed technology entry found while loading content.

    Content errors are collected, never raised out of loading: the
    offending node is excluded and loading continues.
    """

    def __init__(self, tech_id: str, kind: ContentErrorKind, detail: str = ""):
        self.tech_id = tech_id
        self.kind = kind
        self.detail = detail
        message = f"{tech_id}: {kind.value}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class ResearchFailure(Enum):
    INVALID_STATE = "invalid_state"
    ALREADY_RESEARCHED = "already_researched"
    NOT_AVAILABLE = "not_available"
    INSUFFICIENT_RESOURCES = "insufficient_resources"
    NO_ACTIVE_RESEARCH = "no_active_research"


class OperationError(Exception):
    """A research operation was rejected. Nothing was changed."""

    reason: ResearchFailure

    def __init__(self, message: str, tech_id: str | None = None):
        super().__init__(message)
        self.tech_id = tech_id


class InvalidStateError(OperationError):
    reason = ResearchFailure.INVALID_STATE


class AlreadyResearchedError(OperationError):
    reason = ResearchFailure.ALREADY_RESEARCHED


class NotAvailableError(OperationError):
    reason = ResearchFailure.NOT_AVAILABLE


class InsufficientResourcesError(OperationError):
    reason = ResearchFailure.INSUFFICIENT_RESOURCES


class NoActiveResearchError(OperationError):
    reason = ResearchFailure.NO_ACTIVE_RESEARCH
