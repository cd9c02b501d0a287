"""Shell, git and output utilities.

Provides a thin wrapper around subprocess for running git, plus the output
helpers used everywhere else. Status output goes to stderr so that stdout
can carry the JSON report when one is requested.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

_PREFIXES = {
    "info": "",
    "success": "✓ ",
    "warning": "Warning: ",
    "error": "Error: ",
}


def git(*args: str, cwd: Path | None = None) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "tag", "--list").
        cwd: Directory to run in. Defaults to the process working directory.

    Returns:
        Stripped stdout from the git command.

    Raises:
        subprocess.CalledProcessError: If git exits non-zero. The
            captured stderr is attached to the exception.
    """
    result = subprocess.run(
        ["git", *args], capture_output=True, text=True, check=True, cwd=cwd
    )
    return result.stdout.strip()


def step(msg: str) -> None:
    """Print a visually distinct step header."""
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}", file=sys.stderr)


def log(msg: str, level: str = "info") -> None:
    """Print a status line.

    Args:
        msg: Message to print. Multi-line messages are printed as-is.
        level: One of "info", "success", "warning", "error".
    """
    print(f"{_PREFIXES.get(level, '')}{msg}", file=sys.stderr)
