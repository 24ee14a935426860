"""
Invocation of the evaluation engine.

The engine call never raises out of ``invoke_scan``; its outcome is either
``ScanSucceeded`` or ``ScanFailed`` and callers decide what a failure means.
The scan pipeline treats every failure as fatal via ``unwrap()``.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

from flowlinter.core.models import ParsedFlow, ScanResult
from flowlinter.core.sandbox import ExecutionPolicy
from flowlinter.errors import ScanEngineFailure

logger = logging.getLogger(__name__)


class EvaluationEngine(Protocol):
    """Interface of a rule-evaluation engine."""

    def parse(self, paths: Sequence[str]) -> List[ParsedFlow]:
        ...

    def evaluate(
        self, parsed: Sequence[ParsedFlow], config: Optional[Dict[str, Any]] = None
    ) -> List[ScanResult]:
        ...


@dataclass(frozen=True)
class ScanSucceeded:
    results: List[ScanResult]

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> List[ScanResult]:
        return self.results


@dataclass(frozen=True)
class ScanFailed:
    error: Exception

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> List[ScanResult]:
        raise ScanEngineFailure(f"Scan engine failed: {self.error}") from self.error


ScanOutcome = Union[ScanSucceeded, ScanFailed]


def invoke_scan(
    engine: EvaluationEngine,
    parsed: Sequence[ParsedFlow],
    user_config: Optional[Dict[str, Any]] = None,
    policy: Optional[ExecutionPolicy] = None,
) -> ScanOutcome:
    """
    Run the engine over parsed flows under an execution policy.

    A non-empty user configuration is passed to the engine; otherwise the
    engine runs with its defaults.
    """
    policy = policy or ExecutionPolicy()
    try:
        with policy.applied():
            if user_config:
                results = engine.evaluate(parsed, user_config)
            else:
                results = engine.evaluate(parsed)
    except Exception as e:
        logger.debug("Scan engine raised: %r", e)
        return ScanFailed(e)
    return ScanSucceeded(list(results))
