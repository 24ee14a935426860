"""
Retrieval of flow metadata from a Salesforce org before scanning.

The retrieval shells out to the Salesforce CLI through a ``CommandRunner``
so tests can substitute the process.
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

from flowlinter.errors import RemoteRetrievalFailure

logger = logging.getLogger(__name__)


RETRIEVE_COMMAND = ["sf", "project", "retrieve", "start", "-m", "Flow"]


@dataclass(frozen=True)
class CommandResult:
    output: str
    exit_code: int


class CommandRunner:
    """Runs an external command to completion."""

    def run(self, command: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
        raise NotImplementedError


class SubprocessRunner(CommandRunner):
    """Runs commands with ``subprocess``, capturing all of their output."""

    def run(self, command: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
        try:
            completed = subprocess.run(
                list(command),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError as e:
            raise RemoteRetrievalFailure(f"Command not found: {command[0]}") from e
        except subprocess.TimeoutExpired as e:
            output = e.output if isinstance(e.output, str) else ""
            raise RemoteRetrievalFailure(
                f"Retrieve Operation timed out after {timeout} seconds", output=output
            ) from e
        return CommandResult(output=completed.stdout or "", exit_code=completed.returncode)


def build_retrieve_command(target: Optional[str] = None) -> List[str]:
    """Build the retrieve command; without a target the default org is used."""
    command = list(RETRIEVE_COMMAND)
    if target:
        command.extend(["-o", target])
    return command


def retrieve_flows(
    target: Optional[str] = None,
    runner: Optional[CommandRunner] = None,
    timeout: Optional[float] = None,
) -> CommandResult:
    """
    Retrieve flow metadata from an org into the current project.

    Raises RemoteRetrievalFailure if the command cannot run or exits
    non-zero.
    """
    runner = runner or SubprocessRunner()
    command = build_retrieve_command(target)
    logger.info("Retrieving flow metadata: %s", " ".join(command))

    result = runner.run(command, timeout=timeout)
    if result.exit_code != 0:
        logger.debug("Retrieve output:\n%s", result.output)
        raise RemoteRetrievalFailure(
            "Retrieve Operation Failed. Unable to retrieve flow metadata from the org.",
            output=result.output,
            exit_code=result.exit_code,
        )
    logger.info("Retrieve completed")
    return result
