"""
Scan pipeline: resolve flows, run the engine under an execution policy,
flatten its results and gate on severity.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from flowlinter.core.aggregate import aggregate
from flowlinter.core.invoker import EvaluationEngine, invoke_scan
from flowlinter.core.models import RunSummary, ScanReport
from flowlinter.core.resolver import find_flows, resolve_flows
from flowlinter.core.sandbox import ExecutionPolicy, SandboxPolicy
from flowlinter.core.threshold import DEFAULT_THRESHOLD, decide

logger = logging.getLogger(__name__)


def run_scan(
    engine: EvaluationEngine,
    directory: Optional[str] = None,
    files: Optional[Sequence[str]] = None,
    user_config: Optional[Dict[str, Any]] = None,
    fail_on: str = DEFAULT_THRESHOLD,
    policy: Optional[ExecutionPolicy] = None,
    finder: Callable[[str], List[str]] = find_flows,
) -> ScanReport:
    """
    Scan flows and build the run report.

    Raises ScanEngineFailure if the engine fails; findings never raise.
    """
    flow_files = resolve_flows(directory, files, finder)
    logger.info("Identified %d flows to scan", len(flow_files))

    parsed = engine.parse(flow_files)
    logger.debug("Parsed flows: %d", len(parsed))

    if policy is None:
        policy = SandboxPolicy()
    outcome = invoke_scan(engine, parsed, user_config, policy)
    scan_results = outcome.unwrap()
    logger.debug("Scan results: %d", len(scan_results))

    issues, tally = aggregate(scan_results)
    status = decide(fail_on, tally)

    summary = RunSummary.build(len(scan_results), len(issues), tally)
    logger.info(summary.message)

    return ScanReport(
        summary=summary,
        status=status,
        results=issues,
        scan_results=scan_results,
        tally=tally,
    )
