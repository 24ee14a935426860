"""
Parser for Salesforce flow metadata files.

Turns ``*.flow-meta.xml`` documents into ``Flow`` objects: flow attributes,
the elements it declares and the connectors between them.
"""

import logging
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from defusedxml.common import DefusedXmlException
from defusedxml.ElementTree import fromstring as parse_xml

from flowlinter.core.models import Connector, Flow, FlowElement, ParsedFlow

logger = logging.getLogger(__name__)


# Element tags by the kind of flow element they declare
NODE_TAGS = {
    "actionCalls",
    "apexPluginCalls",
    "assignments",
    "collectionProcessors",
    "customErrors",
    "decisions",
    "loops",
    "orchestratedStages",
    "recordCreates",
    "recordDeletes",
    "recordLookups",
    "recordRollbacks",
    "recordUpdates",
    "screens",
    "steps",
    "subflows",
    "transforms",
    "waits",
}

VARIABLE_TAGS = {"variables"}

RESOURCE_TAGS = {
    "choices",
    "constants",
    "dynamicChoiceSets",
    "formulas",
    "stages",
    "textTemplates",
}

FLOW_SUFFIXES = (".flow-meta.xml", ".flow")
DEFAULT_FLOW_TYPE = "Flow"


def _strip_namespaces(root: ET.Element) -> None:
    for el in root.iter():
        if isinstance(el.tag, str) and "}" in el.tag:
            el.tag = el.tag.split("}", 1)[1]


def _text(parent: Optional[ET.Element], tag: str) -> Optional[str]:
    if parent is None:
        return None
    child = parent.find(tag)
    if child is None or child.text is None:
        return None
    return child.text.strip()


def flow_name_from_path(path: str) -> str:
    """Derive a flow's API name from its file name."""
    base = os.path.basename(path)
    for suffix in FLOW_SUFFIXES:
        if base.endswith(suffix):
            return base[: -len(suffix)]
    return os.path.splitext(base)[0]


def parse_connectors(node: ET.Element) -> Tuple[Connector, ...]:
    """Collect connectors declared anywhere below an element."""
    connectors: List[Connector] = []
    for child in node.iter():
        if child is node:
            continue
        if child.tag != "connector" and not child.tag.endswith("Connector"):
            continue
        target = _text(child, "targetReference")
        if target:
            connectors.append(Connector(type=child.tag, target=target))
    return tuple(connectors)


def _meta_type(tag: str) -> Optional[str]:
    if tag in NODE_TAGS:
        return "node"
    if tag in VARIABLE_TAGS:
        return "variable"
    if tag in RESOURCE_TAGS:
        return "resource"
    return None


def build_flow(root: ET.Element, path: str) -> Flow:
    """Build a Flow from a namespace-free ``<Flow>`` element."""
    elements: List[FlowElement] = []
    for child in root:
        meta_type = _meta_type(child.tag)
        if meta_type is None:
            continue
        name = _text(child, "name")
        if not name:
            continue
        elements.append(FlowElement(
            name=name,
            meta_type=meta_type,
            sub_type=child.tag,
            connectors=parse_connectors(child) if meta_type == "node" else (),
            source=child,
        ))

    start = root.find("start")
    start_reference = _text(root, "startElementReference")
    if start_reference is None and start is not None:
        start_reference = _text(start.find("connector"), "targetReference")

    name = flow_name_from_path(path)
    return Flow(
        name=name,
        label=_text(root, "label") or name,
        type=_text(root, "processType") or DEFAULT_FLOW_TYPE,
        fs_path=path,
        api_version=_text(root, "apiVersion"),
        status=_text(root, "status"),
        description=_text(root, "description"),
        trigger_type=_text(start, "triggerType"),
        start_reference=start_reference,
        elements=tuple(elements),
        source=root,
    )


def parse_flow_file(path: str) -> ParsedFlow:
    """Parse one flow file; failures are reported on the ParsedFlow."""
    try:
        content = Path(path).read_bytes()
        root = parse_xml(content)
    except (OSError, ET.ParseError, DefusedXmlException) as e:
        logger.warning("Could not parse flow %s: %s", path, e)
        return ParsedFlow(uri=path, error_message=str(e))

    _strip_namespaces(root)
    if root.tag != "Flow":
        message = f"Not a flow definition (root element <{root.tag}>)"
        logger.warning("Could not parse flow %s: %s", path, message)
        return ParsedFlow(uri=path, error_message=message)

    return ParsedFlow(uri=path, flow=build_flow(root, path))


def parse_flows(paths: Sequence[str]) -> List[ParsedFlow]:
    """Parse flow files, preserving their order."""
    return [parse_flow_file(path) for path in paths]
