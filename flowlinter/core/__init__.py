"""Scan pipeline and shared data structures."""

from flowlinter.core.aggregate import aggregate
from flowlinter.core.invoker import ScanFailed, ScanSucceeded, invoke_scan
from flowlinter.core.models import (
    Flow, IssueRecord, ParsedFlow, ResultDetails, RuleDefinition, RuleResult,
    RunSummary, ScanReport, ScanResult, SeverityTally,
)
from flowlinter.core.pipeline import run_scan
from flowlinter.core.resolver import find_flows, resolve_flows
from flowlinter.core.sandbox import ExecutionPolicy, SandboxPolicy
from flowlinter.core.threshold import decide

__all__ = [
    "aggregate",
    "decide",
    "find_flows",
    "invoke_scan",
    "resolve_flows",
    "run_scan",
    "ExecutionPolicy",
    "Flow",
    "IssueRecord",
    "ParsedFlow",
    "ResultDetails",
    "RuleDefinition",
    "RuleResult",
    "RunSummary",
    "SandboxPolicy",
    "ScanFailed",
    "ScanReport",
    "ScanResult",
    "ScanSucceeded",
    "SeverityTally",
]
