"""
Error types raised by the flow linter.

Findings are never raised; these cover the conditions that abort a run.
"""


class FlowLinterError(Exception):
    """Base class for all flow linter errors."""


class ConfigError(FlowLinterError):
    """Configuration file is missing, unreadable or malformed."""


class ScanEngineFailure(FlowLinterError):
    """The evaluation engine raised while scanning flows."""


class RemoteRetrievalFailure(FlowLinterError):
    """Retrieving flow metadata from the target org failed."""

    def __init__(self, message: str, output: str = "", exit_code: int = 1):
        super().__init__(message)
        self.output = output
        self.exit_code = exit_code


class BlockedCapability(FlowLinterError):
    """Rule logic tried to build executable code from a string."""


class BlockedRemoteImport(FlowLinterError):
    """Rule logic tried to import a module from a remote locator."""

    def __init__(self, locator: str):
        super().__init__(f"Blocked remote import: {locator}")
        self.locator = locator


class RuleLoadError(FlowLinterError):
    """A custom rule named in the configuration could not be loaded."""
