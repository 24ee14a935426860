"""
Data structures shared by the scan pipeline and the evaluation engine.

The engine produces ScanResult / RuleResult / ResultDetails; the pipeline
flattens them into IssueRecord objects and summarizes a run with RunSummary.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import xml.etree.ElementTree as ET


# Severities understood by the threshold policy, most severe first
SEVERITIES = ("error", "warning", "note")
DEFAULT_SEVERITY = "error"

FLOW_FILE_SUFFIX = ".flow-meta.xml"


@dataclass(frozen=True)
class Connector:
    """An outgoing edge from one flow element to another."""
    type: str
    target: str


@dataclass(frozen=True)
class FlowElement:
    """A node, variable or resource declared in a flow."""
    name: str
    meta_type: str  # node, variable, resource
    sub_type: str  # XML tag, e.g. recordUpdates
    connectors: Tuple[Connector, ...] = ()
    source: Optional[ET.Element] = field(default=None, compare=False, repr=False)

    @property
    def targets(self) -> List[str]:
        return [c.target for c in self.connectors]


@dataclass(frozen=True)
class Flow:
    """Identity and structure of a single flow definition."""
    name: str
    label: str
    type: str
    fs_path: str
    api_version: Optional[str] = None
    status: Optional[str] = None
    description: Optional[str] = None
    trigger_type: Optional[str] = None
    start_reference: Optional[str] = None
    elements: Tuple[FlowElement, ...] = ()
    source: Optional[ET.Element] = field(default=None, compare=False, repr=False)

    @property
    def api_name(self) -> str:
        return f"{self.name}{FLOW_FILE_SUFFIX}"

    @property
    def nodes(self) -> List[FlowElement]:
        return [e for e in self.elements if e.meta_type == "node"]

    @property
    def variables(self) -> List[FlowElement]:
        return [e for e in self.elements if e.meta_type == "variable"]

    def element(self, name: str) -> Optional[FlowElement]:
        for element in self.elements:
            if element.name == name:
                return element
        return None


@dataclass(frozen=True)
class ParsedFlow:
    """Outcome of parsing one flow file."""
    uri: str
    flow: Optional[Flow] = None
    error_message: Optional[str] = None


@dataclass(frozen=True)
class RuleDefinition:
    """Identity of a rule as reported alongside its results."""
    name: str
    label: str
    description: str


@dataclass(frozen=True)
class ResultDetails:
    """One occurrence of a rule violation inside a flow."""
    name: str
    type: str
    meta_type: str
    expression: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "type": self.type,
            "metaType": self.meta_type,
        }
        if self.expression is not None:
            data["expression"] = self.expression
        return data


@dataclass(frozen=True)
class RuleResult:
    """Outcome of evaluating one rule against one flow."""
    rule_definition: RuleDefinition
    occurs: bool
    details: Tuple[ResultDetails, ...] = ()
    severity: Optional[str] = None


@dataclass(frozen=True)
class ScanResult:
    """All rule outcomes for one flow."""
    flow: Flow
    rule_results: Tuple[RuleResult, ...] = ()


@dataclass(frozen=True)
class IssueRecord:
    """
    A single reported issue: one rule occurrence with its flow context.
    """
    occurrence: ResultDetails
    rule_description: str
    rule: str
    flow_name: str
    flow_type: str
    severity: str
    flow_uri: str
    flow_api_name: str

    @property
    def name(self) -> str:
        return self.occurrence.name

    @property
    def type(self) -> str:
        return self.occurrence.type

    def to_dict(self) -> Dict[str, Any]:
        data = self.occurrence.to_dict()
        data.update({
            "ruleDescription": self.rule_description,
            "rule": self.rule,
            "flowName": self.flow_name,
            "flowType": self.flow_type,
            "severity": self.severity,
            "flowUri": self.flow_uri,
            "flowApiName": self.flow_api_name,
        })
        return data


class SeverityTally(Counter):
    """Issue counts per severity name. Missing severities count as zero."""

    @property
    def total(self) -> int:
        return sum(self.values())


@dataclass(frozen=True)
class RunSummary:
    """Headline numbers for one scan run."""
    flows_number: int
    results: int
    message: str
    error_levels_details: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def build(cls, flows_number: int, results: int, tally: SeverityTally) -> "RunSummary":
        return cls(
            flows_number=flows_number,
            results=results,
            message=f"A total of {results} results have been found in {flows_number} flows.",
            error_levels_details=dict(tally),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "flowsNumber": self.flows_number,
            "results": self.results,
            "message": self.message,
            "errorLevelsDetails": dict(self.error_levels_details),
        }


@dataclass(frozen=True)
class ScanReport:
    """Everything a scan run produces."""
    summary: RunSummary
    status: int
    results: List[IssueRecord]
    scan_results: List[ScanResult] = field(default_factory=list)
    tally: SeverityTally = field(default_factory=SeverityTally)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "status": self.status,
            "results": [r.to_dict() for r in self.results],
        }
