"""Domain model for index generations and their rebuild lifecycle."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CatalogSearchError(Exception):
    """Base error for the catalog search index."""


class IndexConfigurationError(CatalogSearchError):
    """Fatal configuration problem; the manager cannot be used."""


class SearchEngineError(CatalogSearchError):
    """A request to the search engine failed."""

    def __init__(
        self,
        operation: str,
        message: str,
        *,
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(f"{operation}: {message}")
        self.operation = operation
        self.status_code = status_code
        self.body = body


class GenerationBuildError(SearchEngineError):
    """Creating or updating a generation failed; the rebuild is aborted."""


class InvalidStateTransitionError(CatalogSearchError):
    """Raised when the lifecycle is driven out of order."""


class GenerationState(str, Enum):
    """Rebuild lifecycle of the generation a manager targets."""

    ACTIVE = "active"
    BUILDING = "building"
    INSTALLING = "installing"

    def can_transition_to(self, target: GenerationState) -> bool:
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[GenerationState, frozenset[GenerationState]] = {
    GenerationState.ACTIVE: frozenset({GenerationState.BUILDING}),
    # A second prepare before install targets a fresher generation.
    GenerationState.BUILDING: frozenset({GenerationState.BUILDING, GenerationState.INSTALLING}),
    # A failed alias swap may be retried or superseded by a new rebuild.
    GenerationState.INSTALLING: frozenset(
        {GenerationState.INSTALLING, GenerationState.ACTIVE, GenerationState.BUILDING}
    ),
}


@dataclass(slots=True, frozen=True)
class PreparedGeneration:
    """Outcome of ``prepare_new_generation``."""

    name: str
    alias: str
    created: bool

    @property
    def updated(self) -> bool:
        return not self.created


@dataclass(slots=True, frozen=True)
class InstallResult:
    """Outcome of ``install_pending_generation``."""

    alias: str
    generation: str
    deleted: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "alias": self.alias,
            "generation": self.generation,
            "deleted": list(self.deleted),
        }
