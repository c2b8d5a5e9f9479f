"""Best-effort external commands (rsync, git, the grapher baker)."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from src.common.logging import setup_logging

logger = setup_logging(module_name="baker.shell")


@dataclass
class CommandResult:
    """Outcome of one external command."""
    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass
class ShellRunner:
    """Runs commands without a shell and records what ran.

    A non-zero exit is logged, never raised: callers decide whether a
    failed step matters.
    """
    dry_run: bool = False
    history: list[CommandResult] = field(default_factory=list)

    def run(self, args: list[str], cwd: Optional[Path] = None) -> CommandResult:
        args = [str(a) for a in args]
        where = f" (in {cwd})" if cwd else ""
        logger.info("$ %s%s", " ".join(args), where)

        if self.dry_run:
            result = CommandResult(args=args, returncode=0, skipped=True)
            self.history.append(result)
            return result

        try:
            completed = subprocess.run(
                args,
                cwd=str(cwd) if cwd else None,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            logger.error("Command not found: %s", args[0])
            result = CommandResult(args=args, returncode=127, stderr=f"{args[0]}: not found")
            self.history.append(result)
            return result

        result = CommandResult(
            args=args,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
        if not result.ok:
            logger.warning(
                "Command exited %d: %s\n%s",
                result.returncode, " ".join(args), result.stderr.strip(),
            )
        self.history.append(result)
        return result
