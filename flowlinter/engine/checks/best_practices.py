"""
Rules enforcing flow documentation, naming and maintenance practices.
"""

import operator
import re
from typing import Callable, Dict, Generator, Optional, Tuple

from flowlinter.core.models import Flow, ResultDetails
from flowlinter.engine.rules import Rule, attribute_detail, element_detail, rule


@rule
class FlowDescription(Rule):
    name = "FlowDescription"
    label = "Missing Flow Description"
    description = "Every flow should describe its purpose so it can be maintained."

    def check(self, flow: Flow) -> Generator[ResultDetails, None, None]:
        if not flow.description:
            yield attribute_detail("description", "attribute", expression="!= null")


_OPERATORS: Dict[str, Callable[[float, float], bool]] = {
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
    "==": operator.eq,
    "=": operator.eq,
}

_VERSION_EXPRESSION = re.compile(r"^\s*(>=|<=|==|>|<|=)?\s*(\d+(?:\.\d+)?)\s*$")


def parse_version_expression(expression: str) -> Tuple[Callable[[float, float], bool], float]:
    """Parse expressions such as ``>=58`` into a comparison and a version."""
    match = _VERSION_EXPRESSION.match(expression)
    if not match:
        raise ValueError(f"Invalid API version expression: {expression!r}")
    symbol, version = match.groups()
    return _OPERATORS[symbol or ">="], float(version)


@rule
class APIVersion(Rule):
    name = "APIVersion"
    label = "Outdated API Version"
    description = (
        "Flows running on old API versions miss platform fixes and behave "
        "differently from newly built flows. Keep the API version current."
    )

    DEFAULT_EXPRESSION = ">=50"

    def check(self, flow: Flow) -> Generator[ResultDetails, None, None]:
        expression = str(self.options.get("expression", self.DEFAULT_EXPRESSION))
        compare, required = parse_version_expression(expression)
        version = _as_number(flow.api_version)
        if version is None or not compare(version, required):
            yield attribute_detail(flow.api_version or "missing", "apiVersion", expression=expression)


def _as_number(value: Optional[str]) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except ValueError:
        return None


@rule
class InactiveFlow(Rule):
    name = "InactiveFlow"
    label = "Inactive Flow"
    description = (
        "Draft and obsolete flows never run. Activate them or remove them "
        "from the source tree."
    )
    severity = "note"

    def check(self, flow: Flow) -> Generator[ResultDetails, None, None]:
        if flow.status != "Active":
            yield attribute_detail(flow.status or "missing", "status", expression="== Active")


@rule
class CopyAPIName(Rule):
    name = "CopyAPIName"
    label = "Copy API Name"
    description = (
        "Elements named like 'Copy_1_of_Update_Account' were pasted without "
        "being renamed. Give them a name that says what they do."
    )
    severity = "warning"

    COPY_PATTERN = re.compile(r"Copy_[0-9]+_of_[A-Za-z0-9]+", re.IGNORECASE)

    def check(self, flow: Flow) -> Generator[ResultDetails, None, None]:
        for node in flow.nodes:
            if self.COPY_PATTERN.search(node.name):
                yield element_detail(node)


@rule
class FlowName(Rule):
    name = "FlowName"
    label = "Flow Naming Convention"
    description = (
        "Flow API names should follow a naming convention, by default "
        "'Domain_Description'."
    )
    severity = "note"

    DEFAULT_EXPRESSION = "[A-Za-z0-9]+_[A-Za-z0-9]+"

    def check(self, flow: Flow) -> Generator[ResultDetails, None, None]:
        expression = str(self.options.get("expression", self.DEFAULT_EXPRESSION))
        if not re.fullmatch(expression, flow.name):
            yield attribute_detail(flow.name, "name", expression=expression)


@rule
class UnusedVariable(Rule):
    name = "UnusedVariable"
    label = "Unused Variable"
    description = "Variables that nothing in the flow reads or writes should be removed."
    severity = "warning"

    def check(self, flow: Flow) -> Generator[ResultDetails, None, None]:
        if flow.source is None:
            return
        for variable in flow.variables:
            others = []
            for child in flow.source:
                if child is variable.source:
                    continue
                others.extend(child.itertext())
            text = "\n".join(others)
            pattern = re.compile(r"(?<![\w$])" + re.escape(variable.name) + r"(?!\w)", re.IGNORECASE)
            if not pattern.search(text):
                yield element_detail(variable)
