"""
Shared fixtures for the flow linter tests.
"""

import os
import sys

import pytest

TESTS_DIR = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, TESTS_DIR)
sys.path.insert(0, os.path.dirname(TESTS_DIR))

from factories import flow_xml  # noqa: E402


@pytest.fixture
def write_flow(tmp_path):
    """Write a flow file and return its path."""
    def _write(name, body, directory=None):
        target = directory or tmp_path
        target.mkdir(parents=True, exist_ok=True)
        path = target / f"{name}.flow-meta.xml"
        path.write_text(flow_xml(body), encoding="utf-8")
        return str(path)
    return _write
