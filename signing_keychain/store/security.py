"""macOS `security` command-line tool invoker."""

import subprocess
from typing import Any, Dict, List, Sequence

from .base import StoreTool, StoreToolError
from .. import actions


class SecurityTool(StoreTool):
    """Runs keychain commands through /usr/bin/security."""

    def __init__(self, config: Dict[str, Any] = None):
        """Initialize security tool."""
        super().__init__(config)
        self.executable = self.config.get("security_path", "security")

    def command_line(self, args: Sequence[str]) -> List[str]:
        return [self.executable, *args]

    def _execute(self, args: Sequence[str]) -> subprocess.CompletedProcess:
        if not args:
            raise ValueError("security requires a sub-command")

        cmd = self.command_line(args)
        actions.info(f"[command]{self.describe(args)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise StoreToolError(args[0], stderr=str(e)) from e

        if result.returncode != 0:
            raise StoreToolError(args[0], result.returncode, result.stderr or "")

        return result

    def run(self, args: Sequence[str]) -> None:
        result = self._execute(args)
        if result.stdout:
            actions.info(result.stdout.rstrip("\n"))

    def output(self, args: Sequence[str]) -> str:
        return self._execute(args).stdout or ""
