"""
Execution policies applied around the rule engine.

Rule logic may come from third-party modules named in the user
configuration. Before the engine runs, the scan pipeline applies an
execution policy that removes two capabilities from the interpreter:

- building and running code from strings (``eval``, ``exec``, ``compile``
  of source that does not come from a file on disk), which then raises
  ``BlockedCapability``;
- importing modules from remote locators (``https://...``), which then
  raises ``BlockedRemoteImport``. Ordinary imports still go through.

Policies are plain objects injected into the scan invoker so tests can
substitute them. ``SandboxPolicy(one_way=True)`` never restores the
interpreter, matching a one-shot CLI process.
"""

import builtins
import importlib
import logging
import os
import sys
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from flowlinter.errors import BlockedCapability, BlockedRemoteImport

logger = logging.getLogger(__name__)


REMOTE_PREFIXES = ("http://", "https://", "ftp://", "ftps://")

# Audit hooks cannot be removed once added; the hook is installed once and
# only acts while at least one policy has armed it.
_hook_installed = False
_armed = 0


def is_remote_locator(locator: Any) -> bool:
    """Check whether a module locator points at a network resource."""
    return isinstance(locator, str) and locator.strip().lower().startswith(REMOTE_PREFIXES)


def _is_synthetic_source(filename: Any) -> bool:
    # Code built from strings reports pseudo filenames such as "<string>".
    # Frozen stdlib modules report "<frozen ...>" and stay allowed.
    name = filename if isinstance(filename, str) else str(filename or "")
    return name.startswith("<") and not name.startswith("<frozen")


def _is_module_file(filename: Any) -> bool:
    # The import system compiles modules under their real path; anything
    # else handed to compile() is source built at runtime.
    if isinstance(filename, str) and filename.startswith("<frozen"):
        return True
    if not isinstance(filename, (str, bytes, os.PathLike)):
        return False
    return os.path.isfile(filename)


def _audit_hook(event: str, args: tuple) -> None:
    if not _armed:
        return
    if event == "exec":
        filename = getattr(args[0], "co_filename", "") if args else ""
        if _is_synthetic_source(filename):
            raise BlockedCapability("Blocked dynamic code execution in rule logic")
    elif event == "compile":
        filename = args[1] if len(args) > 1 else None
        if not _is_module_file(filename):
            raise BlockedCapability("Blocked dynamic code compilation in rule logic")


def _install_audit_hook() -> None:
    global _hook_installed
    if not _hook_installed:
        sys.addaudithook(_audit_hook)
        _hook_installed = True


class ExecutionPolicy:
    """
    Permissive policy: leaves the interpreter untouched.

    Subclasses override the ``disable_*`` hooks; ``applied()`` arms the
    policy for the duration of a block.
    """

    def disable_dynamic_execution(self) -> None:
        pass

    def disable_remote_import(self) -> None:
        pass

    def restore(self) -> None:
        pass

    @contextmanager
    def applied(self) -> Iterator["ExecutionPolicy"]:
        self.disable_dynamic_execution()
        self.disable_remote_import()
        try:
            yield self
        finally:
            self.restore()


class SandboxPolicy(ExecutionPolicy):
    """Blocks dynamic code execution and remote imports."""

    def __init__(self, one_way: bool = False):
        self.one_way = one_way
        self._dynamic_disabled = False
        self._original_import: Optional[Callable[..., Any]] = None
        self._original_import_module: Optional[Callable[..., Any]] = None

    @property
    def active(self) -> bool:
        return self._dynamic_disabled or self._original_import is not None

    def disable_dynamic_execution(self) -> None:
        global _armed
        if self._dynamic_disabled:
            return
        _install_audit_hook()
        _armed += 1
        self._dynamic_disabled = True
        logger.debug("Dynamic code execution disabled")

    def disable_remote_import(self) -> None:
        if self._original_import is not None:
            return
        original_import = builtins.__import__
        original_import_module = importlib.import_module

        def guarded_import(name, *args, **kwargs):
            if is_remote_locator(name):
                raise BlockedRemoteImport(name)
            return original_import(name, *args, **kwargs)

        def guarded_import_module(name, package=None):
            if is_remote_locator(name):
                raise BlockedRemoteImport(name)
            return original_import_module(name, package)

        self._original_import = original_import
        self._original_import_module = original_import_module
        builtins.__import__ = guarded_import
        importlib.import_module = guarded_import_module
        logger.debug("Remote imports disabled")

    def restore(self) -> None:
        global _armed
        if self.one_way:
            return
        if self._dynamic_disabled:
            _armed -= 1
            self._dynamic_disabled = False
        if self._original_import is not None:
            builtins.__import__ = self._original_import
            importlib.import_module = self._original_import_module
            self._original_import = None
            self._original_import_module = None
        logger.debug("Execution policy restored")
