"""
Flow Linter

Scans Salesforce flow metadata against a configurable rule set and gates
CI pipelines on the severity of what it finds.
"""

__version__ = "1.0.0"
__author__ = "Flow Linter Team"

from flowlinter.core.models import IssueRecord, RunSummary, ScanReport, ScanResult
from flowlinter.core.pipeline import run_scan
from flowlinter.engine import FlowEngine

__all__ = [
    "FlowEngine",
    "IssueRecord",
    "RunSummary",
    "ScanReport",
    "ScanResult",
    "run_scan",
]
