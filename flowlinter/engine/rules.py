"""
Rule base classes and registry for the flow engine.

Built-in rules register themselves with the global registry through the
``@rule`` decorator. Custom rules are loaded from a module or a ``.py``
file named in the configuration.
"""

import importlib
import importlib.util
import logging
from collections import deque
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type

from flowlinter.core.models import (
    Flow, FlowElement, ResultDetails, RuleDefinition, RuleResult
)
from flowlinter.errors import RuleLoadError

logger = logging.getLogger(__name__)


# Marks a rule exception that silences the rule for a whole flow
ALL_ELEMENTS = "*"


class Rule:
    """
    Base class for flow rules.

    Subclasses set the class attributes and implement ``check``, yielding
    one ResultDetails per violation.
    """

    name = "GenericRule"
    label = "Generic Rule"
    description = ""
    severity: Optional[str] = None
    enabled_by_default = True

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        self.options = options or {}

    @property
    def definition(self) -> RuleDefinition:
        return RuleDefinition(name=self.name, label=self.label, description=self.description)

    def check(self, flow: Flow) -> Iterable[ResultDetails]:
        return []

    def execute(
        self,
        flow: Flow,
        severity: Optional[str] = None,
        exceptions: Sequence[str] = (),
    ) -> RuleResult:
        """Run the rule against a flow, dropping excepted elements."""
        if ALL_ELEMENTS in exceptions:
            details = []
        else:
            details = [d for d in self.check(flow) if d.name not in exceptions]
        return RuleResult(
            rule_definition=self.definition,
            occurs=bool(details),
            details=tuple(details),
            severity=severity or self.severity,
        )


class RuleRegistry:
    """Registry of rule classes keyed by rule name."""

    _instance: Optional["RuleRegistry"] = None

    def __init__(self):
        self._rules: Dict[str, Type[Rule]] = {}

    @classmethod
    def get_instance(cls) -> "RuleRegistry":
        """Get the singleton registry instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def register(self, rule_class: Type[Rule]) -> Type[Rule]:
        self._rules[rule_class.name] = rule_class
        return rule_class

    def get(self, name: str) -> Optional[Type[Rule]]:
        return self._rules.get(name)

    def all_rules(self) -> List[Type[Rule]]:
        return list(self._rules.values())

    def default_rules(self) -> List[Type[Rule]]:
        return [r for r in self._rules.values() if r.enabled_by_default]

    @property
    def rule_count(self) -> int:
        return len(self._rules)


# Global registry instance
registry = RuleRegistry.get_instance()


def rule(cls: Type[Rule]) -> Type[Rule]:
    """Decorator registering a rule with the global registry."""
    return registry.register(cls)


def load_custom_rule(name: str, locator: str) -> Type[Rule]:
    """
    Load the rule class ``name`` from a module locator.

    ``locator`` is either a path to a ``.py`` file or an importable module
    name. Anything else, remote locators included, goes through
    ``importlib.import_module`` so the active execution policy sees it.
    """
    if locator.endswith(".py") and "://" not in locator:
        path = Path(locator)
        if not path.is_file():
            raise RuleLoadError(f"Rule module not found for {name}: {locator}")
        spec = importlib.util.spec_from_file_location(f"flowlinter_custom_rules.{name}", path)
        if spec is None or spec.loader is None:
            raise RuleLoadError(f"Cannot load rule module for {name}: {locator}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
    else:
        try:
            module = importlib.import_module(locator)
        except ImportError as e:
            raise RuleLoadError(f"Cannot import rule module for {name}: {locator} ({e})") from e

    rule_class = getattr(module, name, None)
    if not isinstance(rule_class, type) or not issubclass(rule_class, Rule):
        raise RuleLoadError(f"{locator} does not define a rule class named {name}")
    logger.debug("Loaded custom rule %s from %s", name, locator)
    return rule_class


def element_detail(element: FlowElement, expression: Optional[str] = None) -> ResultDetails:
    return ResultDetails(
        name=element.name,
        type=element.sub_type,
        meta_type=element.meta_type,
        expression=expression,
    )


def attribute_detail(name: str, type: str, expression: Optional[str] = None) -> ResultDetails:
    return ResultDetails(name=name, type=type, meta_type="attribute", expression=expression)


def loop_body(flow: Flow, loop: FlowElement) -> List[FlowElement]:
    """
    Elements executed for each iteration of a loop.

    Walks the connectors from the loop's next-value connector until the
    path returns to the loop.
    """
    nodes = {node.name: node for node in flow.nodes}
    queue = deque(c.target for c in loop.connectors if c.type == "nextValueConnector")
    seen = {loop.name}
    body: List[FlowElement] = []
    while queue:
        target = queue.popleft()
        if target in seen:
            continue
        seen.add(target)
        node = nodes.get(target)
        if node is None:
            continue
        body.append(node)
        queue.extend(node.targets)
    return body
