"""
Two-variant stage result.

A stage returns Live(data) when its external collaborator answered, or
Fallback(data, reason) when it degraded to static data. Callers can branch
on the variant instead of inspecting logs to learn that a response is
degraded.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

from product_optimizer.models.schemas import DataSource, StageOutcome

T = TypeVar("T")


class FallbackReason(str, Enum):
    """Why a stage did not use its live source."""
    MISSING_CREDENTIALS = "missing_credentials"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    EMPTY_RESULT = "empty_result"


@dataclass(frozen=True)
class Live(Generic[T]):
    data: T

    @property
    def is_fallback(self) -> bool:
        return False

    def outcome(self) -> StageOutcome:
        return StageOutcome(source=DataSource.LIVE)


@dataclass(frozen=True)
class Fallback(Generic[T]):
    data: T
    reason: FallbackReason
    detail: str = ""

    @property
    def is_fallback(self) -> bool:
        return True

    def outcome(self) -> StageOutcome:
        return StageOutcome(source=DataSource.FALLBACK, reason=self.reason.value)


Resolution = Union[Live[T], Fallback[T]]
