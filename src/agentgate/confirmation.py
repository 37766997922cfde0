"""
Confirmation gate for side-effecting tools.

File-writing and shell tools ask a ConfirmationHandler before acting. The
handler returns a ConfirmationOutcome value, never raises, and the tool
turns anything other than APPROVED into a textual result for the model.

Three policies are provided:

- BraveConfirmationHandler: approves everything.
- SafeConfirmationHandler: evaluates an ordered list of rules and approves
  when no rule objects. With no rules configured it approves everything.
- InteractiveConfirmationHandler (see agentgate.interactive): asks the user.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class OperationKind(Enum):
    """Kinds of side effect that require confirmation."""

    FILE_WRITE = "file_write"
    SHELL_COMMAND = "shell_command"


@dataclass(frozen=True)
class OperationRequest:
    """
    Description of an operation awaiting confirmation.

    For file writes, target is the path and old/new content enable a diff
    preview. For shell commands, target is the command string.
    """

    kind: OperationKind
    target: str
    overwrite: bool = False
    old_content: str | None = None
    new_content: str | None = None

    @classmethod
    def file_write(
        cls,
        path: str,
        new_content: str | None = None,
        old_content: str | None = None,
        overwrite: bool = False,
    ) -> OperationRequest:
        return cls(
            kind=OperationKind.FILE_WRITE,
            target=path,
            overwrite=overwrite,
            old_content=old_content,
            new_content=new_content,
        )

    @classmethod
    def shell_command(cls, command: str) -> OperationRequest:
        return cls(kind=OperationKind.SHELL_COMMAND, target=command)

    @property
    def path(self) -> str:
        return self.target

    @property
    def command(self) -> str:
        return self.target

    @property
    def has_diff(self) -> bool:
        return bool(self.overwrite and self.old_content and self.new_content)


class OutcomeType(Enum):
    APPROVED = "approved"
    REJECTED = "rejected"
    ERROR = "error"


@dataclass(frozen=True)
class ConfirmationOutcome:
    """The single verdict produced for one OperationRequest."""

    type: OutcomeType
    message: str = ""

    @classmethod
    def approved(cls) -> ConfirmationOutcome:
        return cls(OutcomeType.APPROVED)

    @classmethod
    def rejected(cls, message: str = "") -> ConfirmationOutcome:
        return cls(OutcomeType.REJECTED, message)

    @classmethod
    def error(cls, message: str) -> ConfirmationOutcome:
        return cls(OutcomeType.ERROR, message)

    @property
    def is_approved(self) -> bool:
        return self.type is OutcomeType.APPROVED

    @property
    def is_rejected(self) -> bool:
        return self.type is OutcomeType.REJECTED

    @property
    def is_error(self) -> bool:
        return self.type is OutcomeType.ERROR


class ConfirmationHandler(ABC):
    """Decides whether a side-effecting operation may proceed."""

    @abstractmethod
    def request_file_write_confirmation(self, request: OperationRequest) -> ConfirmationOutcome:
        """Confirm a file creation or overwrite."""

    @abstractmethod
    def request_shell_command_confirmation(self, command: str) -> ConfirmationOutcome:
        """Confirm execution of a shell command."""


class BraveConfirmationHandler(ConfirmationHandler):
    """Auto-approves every operation."""

    def request_file_write_confirmation(self, request: OperationRequest) -> ConfirmationOutcome:
        return ConfirmationOutcome.approved()

    def request_shell_command_confirmation(self, command: str) -> ConfirmationOutcome:
        return ConfirmationOutcome.approved()


# A rule inspects a request and returns an outcome to stop evaluation, or
# None to defer to the next rule.
ConfirmationRule = Callable[[OperationRequest], ConfirmationOutcome | None]


class SafeConfirmationHandler(ConfirmationHandler):
    """
    Rule-based confirmation.

    Rules run in order and the first non-None outcome wins. A rule that
    raises yields an ERROR outcome instead of propagating.
    """

    def __init__(self, rules: Sequence[ConfirmationRule] | None = None) -> None:
        self._rules: list[ConfirmationRule] = list(rules or [])

    def add_rule(self, rule: ConfirmationRule) -> None:
        self._rules.append(rule)

    @property
    def rules(self) -> list[ConfirmationRule]:
        return list(self._rules)

    def request_file_write_confirmation(self, request: OperationRequest) -> ConfirmationOutcome:
        return self._evaluate(request)

    def request_shell_command_confirmation(self, command: str) -> ConfirmationOutcome:
        return self._evaluate(OperationRequest.shell_command(command))

    def _evaluate(self, request: OperationRequest) -> ConfirmationOutcome:
        for rule in self._rules:
            try:
                outcome = rule(request)
            except Exception as e:
                logger.warning(f"Confirmation rule failed for {request.kind.value} '{request.target}': {e}")
                return ConfirmationOutcome.error(f"Confirmation rule failed: {e}")
            if outcome is not None:
                logger.info(f"Rule decided {outcome.type.value} for {request.kind.value} '{request.target}'")
                return outcome
        return ConfirmationOutcome.approved()
