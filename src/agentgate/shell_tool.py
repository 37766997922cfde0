"""
Shell command tool.

Commands run through the platform shell with a hard timeout. stdout and
stderr are merged into one output so the model sees messages in the order
the process produced them.
"""

import logging
import os
import signal
import subprocess
import sys
from dataclasses import dataclass
from typing import Any

from agentgate.confirmation import ConfirmationHandler
from agentgate.fs_tools import denied_result
from agentgate.tools import BaseTool
from agentgate.validation import validate_command, validate_timeout

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30


@dataclass
class ShellCommandResult:
    command: str
    exit_code: int | None
    output: str
    timed_out: bool = False


def _decode(output: bytes | str | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


def shell_argv(command: str, platform: str | None = None) -> list[str]:
    """argv that runs command through the platform shell."""
    if (platform or sys.platform) == "win32":
        return ["cmd.exe", "/c", command]
    return ["/bin/sh", "-c", command]


def _kill_tree(proc: subprocess.Popen) -> None:
    if sys.platform == "win32":
        proc.kill()
        return
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def run_command(
    command: str,
    timeout_seconds: float,
    working_directory: str | None = None,
) -> ShellCommandResult:
    """Run a command, killing its whole process group once the timeout elapses."""
    try:
        proc = subprocess.Popen(
            shell_argv(command),
            cwd=working_directory,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            start_new_session=sys.platform != "win32",
        )
    except OSError as e:
        return ShellCommandResult(command=command, exit_code=None, output=f"ERROR: {e}")

    try:
        stdout, _ = proc.communicate(timeout=timeout_seconds)
    except subprocess.TimeoutExpired:
        logger.warning(f"Command timed out after {timeout_seconds}s: {command}")
        _kill_tree(proc)
        stdout, _ = proc.communicate()
        return ShellCommandResult(
            command=command,
            exit_code=None,
            output=_decode(stdout).strip(),
            timed_out=True,
        )

    return ShellCommandResult(
        command=command,
        exit_code=proc.returncode,
        output=_decode(stdout).strip(),
    )


def format_result(result: ShellCommandResult) -> str:
    formatted = f"Command: {result.command}\n"

    if result.timed_out:
        formatted += "Status: TIMED OUT\n"
        formatted += f"\nPartial output:\n{result.output}\n"
        formatted += (
            "\nSuggestion: The command exceeded the timeout. "
            "Consider increasing timeoutSeconds or optimizing the operation."
        )
    elif result.exit_code == 0:
        formatted += "Status: SUCCESS (exit code: 0)\n"
        if result.output:
            formatted += f"\nOutput:\n{result.output}"
    else:
        formatted += f"Status: FAILED (exit code: {result.exit_code})\n"
        formatted += f"\nOutput:\n{result.output}\n"
        formatted += (
            "\nSuggestion: The command failed. "
            "Review the output above for error details and adjust your approach."
        )

    return formatted


class ExecuteShellCommandTool(BaseTool):
    name = "execute__shell_command"
    description = (
        "Executes a shell command with timeout support. Use for running builds, tests, "
        "and other command-line operations. Default timeout: 30 seconds."
    )

    def __init__(self, confirmation: ConfirmationHandler) -> None:
        self.confirmation = confirmation

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "command": {
                    "type": "string",
                    "description": "The shell command to execute",
                },
                "timeoutSeconds": {
                    "type": "number",
                    "description": "Timeout in seconds (default: 30, max: 600)",
                    "default": DEFAULT_TIMEOUT_SECONDS,
                },
                "workingDirectory": {
                    "type": "string",
                    "description": "Working directory for the command (optional)",
                },
            },
            "required": ["command"],
        }

    def execute(self, arguments: dict[str, Any]) -> str:
        command = arguments.get("command")
        timeout = arguments.get("timeoutSeconds")
        if timeout is None:
            timeout = DEFAULT_TIMEOUT_SECONDS

        for validation in (validate_command(command), validate_timeout(timeout)):
            if not validation:
                return f"ERROR: {validation.error_message}"

        outcome = self.confirmation.request_shell_command_confirmation(command)
        if not outcome.is_approved:
            logger.info(f"Shell command not approved: {command}")
            return denied_result(outcome, f"Shell command execution cancelled by user: {command}")

        logger.info(f"Executing shell command (timeout {timeout}s): {command}")
        result = run_command(command, timeout, arguments.get("workingDirectory") or None)
        return format_result(result)
