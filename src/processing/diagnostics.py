"""
Radius Demographics - Diagnostics Channel
Structured record of every non-fatal degradation during a report run

Only DataNotLoadedError is ever raised to the caller. Everything else
(bad geometry, identifiers missing from a table, empty radii, benchmark
fallbacks) is recorded here so callers and tests can inspect counts and
reasons without parsing log text.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from src.utils.logging import get_logger

logger = get_logger(__name__)


class DataNotLoadedError(RuntimeError):
    """A required dataset (block group index or demographic table) is absent"""


class SkipReason(str, Enum):
    """Why a unit or radius was degraded"""
    MISSING_GEOMETRY = "missing_geometry"
    MISSING_IDENTIFIER = "missing_identifier"
    GEOMETRY_ERROR = "geometry_error"
    LOOKUP_MISS = "lookup_miss"  # GEOID absent from demographic table
    RATE_LOOKUP_MISS = "rate_lookup_miss"  # GEOID absent from ACS rate table
    EMPTY_RADIUS = "empty_radius"
    TABLE_UNAVAILABLE = "table_unavailable"
    BENCHMARK_FALLBACK = "benchmark_fallback"
    NESTING_VIOLATION = "nesting_violation"


@dataclass(frozen=True)
class DiagnosticEvent:
    reason: SkipReason
    geoid: Optional[str] = None
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"reason": self.reason.value, "geoid": self.geoid, "detail": self.detail}


@dataclass
class Diagnostics:
    """Ordered event list scoped to one report run"""
    events: List[DiagnosticEvent] = field(default_factory=list)

    def record(
        self, reason: SkipReason, geoid: Optional[str] = None, detail: Optional[str] = None
    ) -> None:
        self.events.append(DiagnosticEvent(reason=reason, geoid=geoid, detail=detail))
        logger.debug(f"Diagnostic {reason.value}: geoid={geoid} {detail or ''}".rstrip())

    def counts(self) -> Dict[str, int]:
        return dict(Counter(event.reason.value for event in self.events))

    def by_reason(self, reason: SkipReason) -> List[DiagnosticEvent]:
        return [event for event in self.events if event.reason == reason]

    def __len__(self) -> int:
        return len(self.events)

    def to_dict(self) -> Dict:
        return {
            "counts": self.counts(),
            "events": [event.to_dict() for event in self.events],
        }
