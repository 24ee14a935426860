"""
Rules about failure handling and environment-specific values.
"""

import re
from typing import Generator

from flowlinter.core.models import Flow, ResultDetails
from flowlinter.engine.rules import Rule, element_detail, rule


@rule
class MissingFaultPath(Rule):
    name = "MissingFaultPath"
    label = "Missing Fault Path"
    description = (
        "Elements that can fail at runtime should have a fault connector so "
        "errors are handled instead of surfacing to the user."
    )
    severity = "warning"

    FAULT_CAPABLE = {
        "actionCalls",
        "recordCreates",
        "recordDeletes",
        "recordLookups",
        "recordUpdates",
        "waits",
    }

    def check(self, flow: Flow) -> Generator[ResultDetails, None, None]:
        # Before-save flows do not support fault connectors
        if flow.trigger_type == "RecordBeforeSave":
            return
        for node in flow.nodes:
            if node.sub_type not in self.FAULT_CAPABLE:
                continue
            if not any(c.type == "faultConnector" for c in node.connectors):
                yield element_detail(node)


@rule
class HardcodedId(Rule):
    name = "HardcodedId"
    label = "Hardcoded Id"
    description = (
        "Record Ids differ between orgs. Look records up at runtime or use "
        "custom metadata instead of hardcoding 15 or 18 character Ids."
    )

    ID_PATTERN = re.compile(r"\b[a-zA-Z0-9]{5}0[a-zA-Z0-9]{9}(?:[a-zA-Z0-9]{3})?\b")
    VALUE_TAGS = ("stringValue", "expression", "formula")

    def check(self, flow: Flow) -> Generator[ResultDetails, None, None]:
        for element in flow.elements:
            if element.source is None:
                continue
            found = []
            for tag in self.VALUE_TAGS:
                for value in element.source.iter(tag):
                    for match in self.ID_PATTERN.finditer(value.text or ""):
                        if match.group() not in found:
                            found.append(match.group())
            for record_id in found:
                yield element_detail(element, expression=record_id)
