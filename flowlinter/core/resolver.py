"""
Resolution of the flow files a scan should cover.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)


FLOW_PATTERNS = ("*.flow-meta.xml", "*.flow")

IGNORED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".sf",
    ".sfdx",
    ".idea",
    ".vscode",
    ".venv",
    "node_modules",
    "__pycache__",
}


def find_flows(directory: str) -> List[str]:
    """List flow definition files under a directory, recursively."""
    root = Path(directory)
    found = set()
    for pattern in FLOW_PATTERNS:
        for path in root.rglob(pattern):
            if not path.is_file():
                continue
            if any(part in IGNORED_DIRS for part in path.relative_to(root).parts):
                continue
            found.add(str(path))
    return sorted(found)


def resolve_flows(
    directory: Optional[str] = None,
    files: Optional[Sequence[str]] = None,
    finder: Callable[[str], List[str]] = find_flows,
) -> List[str]:
    """
    Decide which flow files to scan.

    A directory wins, then an explicit file list (kept in the given order),
    then the current working directory. An empty result is valid.
    """
    if directory:
        flow_files = finder(directory)
    elif files:
        flow_files = list(files)
    else:
        flow_files = finder(".")
    logger.debug("Resolved %d flow files", len(flow_files))
    return flow_files
