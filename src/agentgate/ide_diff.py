"""
External visual-merge approval.

The interactive gate can hand a proposed file change to an IDE merge
window. The window is a capability that may be missing, so every entry
point reports IDE_NOT_AVAILABLE instead of failing when it is.
"""

import logging
import os
import shutil
import subprocess
import sys
import tempfile
from collections.abc import Callable, Sequence
from enum import Enum
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class ApprovalResult(Enum):
    APPROVED = "approved"
    REJECTED = "rejected"
    IDE_NOT_AVAILABLE = "ide_not_available"


class ExternalDiffApproval(Protocol):
    """A visual diff tool that can approve or reject a proposed write."""

    name: str

    def is_available(self) -> bool: ...

    def request_approval(
        self,
        file_path: str,
        old_content: str | None,
        new_content: str | None,
    ) -> ApprovalResult: ...


def default_intellij_paths(platform: str | None = None) -> list[str]:
    """Standard IntelliJ IDEA launcher locations for the given platform."""
    platform = platform or sys.platform
    home = os.path.expanduser("~")

    if platform == "darwin":
        return [
            "/Applications/IntelliJ IDEA.app/Contents/MacOS/idea",
            "/Applications/IntelliJ IDEA CE.app/Contents/MacOS/idea",
            "/Applications/IntelliJ IDEA Ultimate.app/Contents/MacOS/idea",
            "/usr/local/bin/idea",
            f"{home}/Applications/IntelliJ IDEA.app/Contents/MacOS/idea",
        ]

    if platform == "win32":
        local_app_data = os.environ.get("LOCALAPPDATA", "")
        return [
            r"C:\Program Files\JetBrains\IntelliJ IDEA\bin\idea64.exe",
            r"C:\Program Files (x86)\JetBrains\IntelliJ IDEA\bin\idea64.exe",
            rf"{local_app_data}\JetBrains\Toolbox\apps\IDEA-U\ch-0\bin\idea64.exe",
        ]

    return [
        "/usr/bin/idea",
        "/usr/local/bin/idea",
        "/opt/idea/bin/idea.sh",
        f"{home}/.local/share/JetBrains/Toolbox/apps/IDEA-U/ch-0/bin/idea.sh",
    ]


def _run_merge(args: list[str]) -> None:
    subprocess.run(args, check=False)


class IntelliJDiffApproval:
    """
    Approval through IntelliJ IDEA's three-way merge window.

    The merge output starts as the old content. Accepting the proposed side
    and saving makes it equal the new content, which counts as approval;
    closing without saving leaves it unchanged, which counts as rejection.
    """

    name = "IntelliJ IDEA"

    def __init__(
        self,
        candidate_paths: Sequence[str] | None = None,
        runner: Callable[[list[str]], None] | None = None,
    ) -> None:
        self._candidate_paths = list(candidate_paths) if candidate_paths is not None else None
        self._runner = runner or _run_merge

    def find_executable(self) -> str | None:
        if self._candidate_paths is None:
            on_path = shutil.which("idea")
            if on_path:
                return on_path
            candidates = default_intellij_paths()
        else:
            candidates = self._candidate_paths

        for candidate in candidates:
            if candidate and os.path.exists(candidate):
                return candidate
        return None

    def is_available(self) -> bool:
        return self.find_executable() is not None

    def request_approval(
        self,
        file_path: str,
        old_content: str | None,
        new_content: str | None,
    ) -> ApprovalResult:
        executable = self.find_executable()
        if executable is None:
            return ApprovalResult.IDE_NOT_AVAILABLE

        suffix = Path(file_path).suffix or ".txt"
        try:
            with tempfile.TemporaryDirectory(prefix="agentgate-merge-") as tmp:
                base = Path(tmp) / f"base{suffix}"
                proposed = Path(tmp) / f"proposed{suffix}"
                output = Path(tmp) / f"output{suffix}"

                base.write_text(old_content or "", encoding="utf-8")
                proposed.write_text(new_content or "", encoding="utf-8")
                output.write_text(old_content or "", encoding="utf-8")

                logger.info(f"Opening {self.name} merge window for {file_path}")
                self._runner([executable, "merge", str(base), str(proposed), str(output)])

                result = output.read_text(encoding="utf-8") if output.exists() else None
        except OSError as e:
            logger.warning(f"{self.name} merge failed: {e}")
            return ApprovalResult.IDE_NOT_AVAILABLE

        if result == (new_content or ""):
            return ApprovalResult.APPROVED
        return ApprovalResult.REJECTED
