"""
Tests for the execution policies applied around the engine.
"""

import builtins
import importlib
import importlib.util

import pytest

from flowlinter.core.sandbox import ExecutionPolicy, SandboxPolicy, is_remote_locator
from flowlinter.errors import BlockedCapability, BlockedRemoteImport


class TestSandboxPolicy:
    """Tests for blocking dynamic execution and remote imports."""

    def test_eval_blocked_while_applied(self):
        """Test that eval of a string fails inside the sandbox."""
        with pytest.raises(BlockedCapability):
            with SandboxPolicy().applied():
                eval("1 + 1")

    def test_exec_blocked_while_applied(self):
        """Test that exec of a string fails and defines nothing."""
        namespace = {}
        with pytest.raises(BlockedCapability):
            with SandboxPolicy().applied():
                exec("x = 1", namespace)
        assert "x" not in namespace

    def test_compile_blocked_while_applied(self):
        """Test that compile with a pseudo file name fails."""
        with pytest.raises(BlockedCapability):
            with SandboxPolicy().applied():
                compile("1 + 1", "<string>", "eval")

    def test_compile_with_file_name_not_on_disk_blocked(self, tmp_path):
        """Test that naming source after a file that does not exist does not get it compiled."""
        namespace = {}
        fake_file = str(tmp_path / "rule_helpers.py")

        with pytest.raises(BlockedCapability):
            with SandboxPolicy().applied():
                exec(compile("x = 40 + 2", fake_file, "exec"), namespace)

        assert "x" not in namespace

    def test_module_file_on_disk_still_loads(self, tmp_path):
        """Test that a module file can be imported inside the sandbox."""
        path = tmp_path / "helper_rules.py"
        path.write_text("ANSWER = 40 + 2\n", encoding="utf-8")

        with SandboxPolicy().applied():
            spec = importlib.util.spec_from_file_location("helper_rules", str(path))
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)

        assert module.ANSWER == 42

    def test_capabilities_restored_afterwards(self):
        """Test that leaving the block gives the interpreter back."""
        original_import = builtins.__import__
        original_import_module = importlib.import_module

        with SandboxPolicy().applied():
            pass

        assert eval("1 + 1") == 2
        assert compile("x = 1", "not_a_real_file.py", "exec") is not None
        assert builtins.__import__ is original_import
        assert importlib.import_module is original_import_module

    def test_remote_import_module_blocked(self):
        """Test that import_module refuses a URL."""
        with SandboxPolicy().applied():
            with pytest.raises(BlockedRemoteImport) as excinfo:
                importlib.import_module("https://example.com/rules.js")
        assert excinfo.value.locator == "https://example.com/rules.js"

    def test_remote_dunder_import_blocked(self):
        """Test that __import__ refuses a URL."""
        with SandboxPolicy().applied():
            with pytest.raises(BlockedRemoteImport):
                __import__("http://example.com/rules")

    def test_local_imports_still_work(self):
        """Test that ordinary imports go through the guard."""
        with SandboxPolicy().applied():
            module = importlib.import_module("json")
            import os.path as os_path
        assert module.dumps({}) == "{}"
        assert os_path.join("a", "b")

    def test_one_way_policy_is_not_restored(self):
        """Test that a one-way policy stays in place after the block."""
        policy = SandboxPolicy(one_way=True)
        original_import = builtins.__import__
        try:
            with policy.applied():
                pass
            assert policy.active
            assert builtins.__import__ is not original_import
        finally:
            policy.one_way = False
            policy.restore()
        assert builtins.__import__ is original_import
        assert not policy.active

    def test_disable_is_idempotent(self):
        """Test that disabling remote imports twice patches once."""
        policy = SandboxPolicy()
        policy.disable_remote_import()
        patched = builtins.__import__
        policy.disable_remote_import()
        assert builtins.__import__ is patched
        policy.restore()


class TestExecutionPolicy:
    """Tests for the permissive base policy."""

    def test_permissive_policy_allows_everything(self):
        """Test that the base policy leaves eval available."""
        with ExecutionPolicy().applied():
            assert eval("2 * 3") == 6


class TestRemoteLocator:

    @pytest.mark.parametrize("locator,expected", [
        ("https://cdn.example.com/rule.py", True),
        ("http://example.com/x", True),
        ("FTP://example.com/x", True),
        ("my_rules.custom", False),
        ("./rules/custom.py", False),
        (None, False),
    ])
    def test_is_remote_locator(self, locator, expected):
        """Test which locators count as remote."""
        assert is_remote_locator(locator) is expected
