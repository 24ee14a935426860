"""
Rules flagging expensive operations placed inside loops.

Each loop iteration repeats its DML, queries and actions, which quickly
exhausts governor limits on bulk record changes.
"""

from typing import Generator, List, Set

from flowlinter.core.models import Flow, ResultDetails
from flowlinter.engine.rules import Rule, element_detail, loop_body, rule


class LoopStatementRule(Rule):
    """Flags elements of ``statement_types`` reachable inside any loop."""

    statement_types: Set[str] = set()

    def check(self, flow: Flow) -> Generator[ResultDetails, None, None]:
        reported: List[str] = []
        for loop in flow.nodes:
            if loop.sub_type != "loops":
                continue
            for element in loop_body(flow, loop):
                if element.sub_type in self.statement_types and element.name not in reported:
                    reported.append(element.name)
                    yield element_detail(element)


@rule
class DMLStatementInLoop(LoopStatementRule):
    name = "DMLStatementInLoop"
    label = "DML Statement In A Loop"
    description = (
        "Create, update and delete operations inside a loop consume a DML "
        "statement per iteration. Collect the records and run the operation "
        "once after the loop."
    )
    statement_types = {"recordCreates", "recordUpdates", "recordDeletes"}


@rule
class SOQLQueryInLoop(LoopStatementRule):
    name = "SOQLQueryInLoop"
    label = "SOQL Query In A Loop"
    description = (
        "Get Records elements inside a loop run one query per iteration. "
        "Query once before the loop and filter the collection instead."
    )
    statement_types = {"recordLookups"}


@rule
class ActionCallsInLoop(LoopStatementRule):
    name = "ActionCallsInLoop"
    label = "Action Calls In Loop"
    description = (
        "Invocable actions and Apex calls inside a loop run once per "
        "iteration. Bulkify the action and call it after the loop."
    )
    severity = "warning"
    statement_types = {"actionCalls", "apexPluginCalls"}
