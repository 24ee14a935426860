"""
Flattening of engine output into issue records.
"""

from typing import Iterable, List, Tuple

from flowlinter.core.models import (
    DEFAULT_SEVERITY, IssueRecord, ScanResult, SeverityTally
)


def aggregate(scan_results: Iterable[ScanResult]) -> Tuple[List[IssueRecord], SeverityTally]:
    """
    Flatten scan results into issue records and count them per severity.

    Records come out in flow order, then rule order, then occurrence order.
    A rule result only contributes when it occurs and carries details.
    """
    issues: List[IssueRecord] = []
    tally = SeverityTally()

    for scan_result in scan_results:
        flow = scan_result.flow
        for rule_result in scan_result.rule_results:
            if not rule_result.occurs or not rule_result.details:
                continue
            definition = rule_result.rule_definition
            severity = rule_result.severity or DEFAULT_SEVERITY
            for detail in rule_result.details:
                issues.append(IssueRecord(
                    occurrence=detail,
                    rule_description=definition.description,
                    rule=definition.label,
                    flow_name=flow.label,
                    flow_type=flow.type,
                    severity=severity,
                    flow_uri=flow.fs_path,
                    flow_api_name=flow.api_name,
                ))
                tally[severity] += 1

    return issues, tally
