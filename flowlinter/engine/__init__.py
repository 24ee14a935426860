"""
Default rule-evaluation engine for Salesforce flow metadata.
"""

from flowlinter.engine.engine import FlowEngine
from flowlinter.engine.parser import parse_flow_file, parse_flows
from flowlinter.engine.rules import Rule, RuleRegistry, registry, rule

__all__ = [
    "FlowEngine",
    "Rule",
    "RuleRegistry",
    "parse_flow_file",
    "parse_flows",
    "registry",
    "rule",
]
