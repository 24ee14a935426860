"""
Default evaluation engine for flow files.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from flowlinter.core.models import ParsedFlow, ScanResult
from flowlinter.engine.parser import parse_flows
from flowlinter.engine.rules import Rule, RuleRegistry, load_custom_rule, registry
from flowlinter.errors import RuleLoadError

# Import checks to register them with the registry
import flowlinter.engine.checks  # noqa: F401

logger = logging.getLogger(__name__)


def _element_names(value: Any) -> Tuple[str, ...]:
    """Normalize a rule exception entry; a single name may be given as a string."""
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(name) for name in value)


class FlowEngine:
    """
    Parses flow files and evaluates the rule set against them.

    Configuration keys:

    - ``rules``: rule name -> options. When non-empty only the listed rules
      run. Options: ``severity``, ``enabled``, ``path`` (custom rule module)
      and rule-specific settings such as ``expression``.
    - ``exceptions``: flow API name -> rule name -> element names to ignore,
      or ``"*"`` to ignore the rule for that flow.
    """

    def __init__(self, rule_registry: Optional[RuleRegistry] = None):
        self.registry = rule_registry or registry

    def parse(self, paths: Sequence[str]) -> List[ParsedFlow]:
        return parse_flows(paths)

    def select_rules(self, rules_config: Mapping[str, Any]) -> List[Tuple[Rule, Optional[str]]]:
        """Instantiate the rules to run with their configured severities."""
        if not rules_config:
            return [(rule_class(), None) for rule_class in self.registry.default_rules()]

        selected: List[Tuple[Rule, Optional[str]]] = []
        for name, options in rules_config.items():
            options = options or {}
            if not isinstance(options, Mapping):
                raise RuleLoadError(f"Options for rule {name} must be a mapping")
            if options.get("enabled", True) is False:
                continue
            locator = options.get("path")
            if locator:
                rule_class = load_custom_rule(name, str(locator))
            else:
                rule_class = self.registry.get(name)
                if rule_class is None:
                    logger.warning("Unknown rule %s in configuration, skipping", name)
                    continue
            selected.append((rule_class(dict(options)), options.get("severity")))
        return selected

    def evaluate(
        self,
        parsed: Sequence[ParsedFlow],
        config: Optional[Dict[str, Any]] = None,
    ) -> List[ScanResult]:
        config = config or {}
        rules = self.select_rules(config.get("rules") or {})
        exceptions = config.get("exceptions") or {}

        results: List[ScanResult] = []
        for item in parsed:
            if item.flow is None:
                logger.warning("Skipping %s: %s", item.uri, item.error_message)
                continue
            flow = item.flow
            flow_exceptions = exceptions.get(flow.name) or {}
            rule_results = tuple(
                rule.execute(
                    flow,
                    severity=severity,
                    exceptions=_element_names(flow_exceptions.get(rule.name)),
                )
                for rule, severity in rules
            )
            results.append(ScanResult(flow=flow, rule_results=rule_results))
        return results
