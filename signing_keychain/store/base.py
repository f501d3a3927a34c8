"""Base store tool interface."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from .. import actions


class StoreToolError(Exception):
    """A store tool command failed or could not be started."""

    def __init__(
        self,
        command: str,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        """
        Initialize error.

        Args:
            command: Sub-command that failed (e.g. "create-keychain")
            returncode: Exit status, or None if the process never started
            stderr: Error output of the tool
        """
        self.command = command
        self.returncode = returncode
        self.stderr = actions.mask(stderr.strip())
        super().__init__(self._format())

    def _format(self) -> str:
        if self.returncode is None:
            message = f"{self.command} could not be started"
        else:
            message = f"{self.command} failed with exit code {self.returncode}"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        return message


class StoreTool(ABC):
    """Abstract base class for invoking the external store tool."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Initialize tool with configuration."""
        self.config = config or {}

    @abstractmethod
    def run(self, args: Sequence[str]) -> None:
        """
        Run a command and wait for it to finish.

        Args:
            args: Sub-command and its arguments

        Raises:
            StoreToolError: If the command exits non-zero or cannot start
        """
        pass

    @abstractmethod
    def output(self, args: Sequence[str]) -> str:
        """
        Run a command and return its standard output.

        Args:
            args: Sub-command and its arguments

        Returns:
            Captured standard output as text

        Raises:
            StoreToolError: If the command exits non-zero or cannot start
        """
        pass

    def describe(self, args: Sequence[str]) -> str:
        """Printable command line with secrets masked."""
        return actions.mask(" ".join(self.command_line(args)))

    def command_line(self, args: Sequence[str]) -> List[str]:
        """Full argument vector for a sub-command."""
        return list(args)
