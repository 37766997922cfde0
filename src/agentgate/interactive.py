"""
Interactive confirmation - the user reviews each side effect.

The handler is a small state machine around a text menu:

- Sticky flags on a GateSession short-circuit prompting: "always" approves
  and "deny" rejects every later request handled with that session.
- Without an attached terminal the handler approves rather than blocking
  a non-interactive run.
- Otherwise it shows the operation (with a diff preview for file edits)
  and loops on the menu until a choice yields an outcome.
- Three consecutive invalid inputs reject the operation and reset the
  invalid-input counter.
"""

import logging
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from agentgate.confirmation import (
    ConfirmationHandler,
    ConfirmationOutcome,
    OperationRequest,
)
from agentgate.diff import compute_stats, format_with_colors, generate_diff
from agentgate.ide_diff import ApprovalResult, ExternalDiffApproval, IntelliJDiffApproval

logger = logging.getLogger(__name__)

PREVIEW_LINES = 10
PREVIEW_CONTEXT_LINES = 2
MAX_CONSECUTIVE_INVALID = 3


class Choice(Enum):
    YES = "y"
    NO = "n"
    ALWAYS = "a"
    DENY = "d"
    VIEW = "v"
    IDE = "i"
    HELP = "?"


_ALIASES: dict[str, Choice] = {
    "y": Choice.YES,
    "yes": Choice.YES,
    "n": Choice.NO,
    "no": Choice.NO,
    "a": Choice.ALWAYS,
    "always": Choice.ALWAYS,
    "d": Choice.DENY,
    "deny": Choice.DENY,
    "v": Choice.VIEW,
    "view": Choice.VIEW,
    "i": Choice.IDE,
    "ide": Choice.IDE,
    "?": Choice.HELP,
    "help": Choice.HELP,
}

_LABELS: dict[Choice, tuple[str, str]] = {
    Choice.YES: ("(y)es", "Approve this operation"),
    Choice.NO: ("(n)o", "Reject this operation"),
    Choice.ALWAYS: ("(a)lways", "Switch to brave mode (approve all)"),
    Choice.DENY: ("(d)eny", "Reject all operations"),
    Choice.VIEW: ("(v)iew", "Show full diff"),
    Choice.IDE: ("(i)de", "Open in an external diff viewer (if available)"),
    Choice.HELP: ("(?)", "Show help"),
}

FILE_WRITE_CHOICES: tuple[Choice, ...] = tuple(Choice)
SHELL_COMMAND_CHOICES: tuple[Choice, ...] = (
    Choice.YES,
    Choice.NO,
    Choice.ALWAYS,
    Choice.DENY,
    Choice.HELP,
)


class InteractiveMenu:
    """Text menu that reads one answer per prompt."""

    def __init__(
        self,
        console: Console | None = None,
        ask: Callable[[str], str] | None = None,
    ) -> None:
        self.console = console or Console()
        self._ask = ask or self._prompt

    def _prompt(self, prompt: str) -> str:
        return Prompt.ask(prompt, console=self.console)

    @staticmethod
    def parse_choice(answer: str | None) -> Choice | None:
        if answer is None:
            return None
        return _ALIASES.get(answer.strip().lower())

    def show_menu(
        self,
        message: str = "Choose an option:",
        choices: Sequence[Choice] = FILE_WRITE_CHOICES,
    ) -> Choice | None:
        """Print the options and return the parsed answer, or None if unparseable."""
        self.console.print()
        self.console.print(escape(message))
        for choice in choices:
            key, description = _LABELS[choice]
            self.console.print(f"  {escape(key):<9} - {description}")
        self.console.print()

        try:
            answer = self._ask("Your choice")
        except EOFError:
            return None
        return self.parse_choice(answer)

    def show_help(self) -> None:
        self.console.print(
            "\n[bold]=== Interactive Mode Help ===[/bold]\n\n"
            "Options:\n"
            "  y/yes    - Approve the current operation\n"
            "  n/no     - Reject the current operation\n"
            "  a/always - Switch to brave mode (auto-approve all remaining operations)\n"
            "  d/deny   - Reject all remaining operations\n"
            "  v/view   - View the full diff of the proposed changes\n"
            "  i/ide    - Open the diff in an external viewer (if installed)\n"
            "  ?/help   - Show this help message\n\n"
            "Tip: Review diffs carefully before approving changes!\n"
        )


@dataclass
class GateSession:
    """
    Mutable state of one interactive gate.

    Owned by a single handler; pass the same session to several handlers
    only if they should share "always" and "deny" decisions.
    """

    always_approve: bool = False
    always_deny: bool = False
    consecutive_invalid: int = 0
    max_consecutive_invalid: int = MAX_CONSECUTIVE_INVALID

    def record_invalid(self) -> bool:
        """Count an invalid answer; True (and a reset) once the limit is reached."""
        self.consecutive_invalid += 1
        if self.consecutive_invalid >= self.max_consecutive_invalid:
            self.consecutive_invalid = 0
            return True
        return False

    def record_valid(self) -> None:
        self.consecutive_invalid = 0


def _stdin_is_tty() -> bool:
    return sys.stdin is not None and sys.stdin.isatty()


class InteractiveConfirmationHandler(ConfirmationHandler):
    """Asks the user to approve each file write and shell command."""

    def __init__(
        self,
        session: GateSession | None = None,
        menu: InteractiveMenu | None = None,
        external_approval: ExternalDiffApproval | None = None,
        console: Console | None = None,
        is_interactive: Callable[[], bool] | None = None,
    ) -> None:
        self.console = console or (menu.console if menu else Console())
        self.session = session or GateSession()
        self.menu = menu or InteractiveMenu(console=self.console)
        self.external_approval = external_approval if external_approval is not None else IntelliJDiffApproval()
        self._is_interactive = is_interactive or _stdin_is_tty

    # -- entry points -------------------------------------------------------

    def request_file_write_confirmation(self, request: OperationRequest) -> ConfirmationOutcome:
        sticky = self._sticky_outcome()
        if sticky is not None:
            return sticky

        if not self._is_interactive():
            logger.info("No TTY available, auto-approving file write")
            return ConfirmationOutcome.approved()

        self._show_operation_details(request)
        if request.has_diff:
            self._show_diff_preview(request.old_content, request.new_content)

        return self._prompt_until_decided(
            "Approve this operation?",
            FILE_WRITE_CHOICES,
            lambda choice: self._handle_file_choice(choice, request),
        )

    def request_shell_command_confirmation(self, command: str) -> ConfirmationOutcome:
        sticky = self._sticky_outcome()
        if sticky is not None:
            return sticky

        if not self._is_interactive():
            logger.info("No TTY available, auto-approving shell command")
            return ConfirmationOutcome.approved()

        self.console.print("\n[yellow]Shell Command Execution Request:[/yellow]")
        self.console.print(f"[cyan]Command: {escape(command)}[/cyan]\n")

        return self._prompt_until_decided(
            "Execute this command?",
            SHELL_COMMAND_CHOICES,
            self._handle_command_choice,
        )

    # -- state machine ------------------------------------------------------

    def _sticky_outcome(self) -> ConfirmationOutcome | None:
        if self.session.always_deny:
            return ConfirmationOutcome.rejected("All operations denied for this session")
        if self.session.always_approve:
            return ConfirmationOutcome.approved()
        return None

    def _prompt_until_decided(
        self,
        message: str,
        choices: Sequence[Choice],
        handle: Callable[[Choice], ConfirmationOutcome | None],
    ) -> ConfirmationOutcome:
        while True:
            choice = self.menu.show_menu(message, choices)

            if choice is None:
                if self.session.record_invalid():
                    self.console.print("\n[red]Too many invalid inputs. Rejecting operation.[/red]")
                    return ConfirmationOutcome.rejected("Too many invalid inputs")
                self.console.print("[red]Invalid choice. Please try again.[/red]")
                continue

            self.session.record_valid()
            outcome = handle(choice)
            if outcome is not None:
                return outcome

    def _handle_common_choice(self, choice: Choice) -> ConfirmationOutcome | None:
        if choice is Choice.YES:
            self.console.print("[green]Approved[/green]")
            return ConfirmationOutcome.approved()

        if choice is Choice.NO:
            self.console.print("[red]Rejected[/red]")
            return ConfirmationOutcome.rejected()

        if choice is Choice.ALWAYS:
            self.console.print("[green]Switching to brave mode (auto-approve all)[/green]")
            self.session.always_approve = True
            return ConfirmationOutcome.approved()

        if choice is Choice.DENY:
            self.console.print("[red]Rejecting all operations[/red]")
            self.session.always_deny = True
            return ConfirmationOutcome.rejected("All operations denied for this session")

        if choice is Choice.HELP:
            self.menu.show_help()
        return None

    def _handle_file_choice(self, choice: Choice, request: OperationRequest) -> ConfirmationOutcome | None:
        if choice is Choice.VIEW:
            self._show_full_diff(request.old_content, request.new_content)
            return None

        if choice is Choice.IDE:
            return self._try_external_approval(request)

        return self._handle_common_choice(choice)

    def _handle_command_choice(self, choice: Choice) -> ConfirmationOutcome | None:
        if choice in (Choice.VIEW, Choice.IDE):
            self.console.print("[yellow]Option not available for shell commands[/yellow]")
            return None
        return self._handle_common_choice(choice)

    def _try_external_approval(self, request: OperationRequest) -> ConfirmationOutcome | None:
        viewer = self.external_approval
        if viewer is None or not viewer.is_available():
            name = getattr(viewer, "name", "External diff viewer")
            self.console.print(f"\n[yellow]{escape(name)} not found[/yellow]")
            return None

        result = viewer.request_approval(request.path, request.old_content, request.new_content)

        if result is ApprovalResult.APPROVED:
            self.console.print(f"\n[green]Approved via {escape(viewer.name)}[/green]")
            return ConfirmationOutcome.approved()

        if result is ApprovalResult.REJECTED:
            self.console.print(f"\n[red]Rejected via {escape(viewer.name)}[/red]")
            return ConfirmationOutcome.rejected()

        self.console.print(f"\n[yellow]{escape(viewer.name)} not available[/yellow]")
        return None

    # -- rendering ----------------------------------------------------------

    def _show_operation_details(self, request: OperationRequest) -> None:
        rule = "━" * 60
        self.console.print()
        self.console.print(f"[yellow]{rule}[/yellow]")
        headline = "File Edit Request" if request.overwrite else "File Creation Request"
        self.console.print(f"[yellow]{headline}[/yellow]")
        self.console.print(f"[cyan]Path: {escape(request.path)}[/cyan]")

        if request.new_content:
            lines = len(request.new_content.split("\n"))
            self.console.print(f"[bright_black]Size: {lines} lines, {len(request.new_content)} characters[/bright_black]")

        self.console.print(f"[yellow]{rule}[/yellow]")

    def _show_diff_preview(self, old_content: str | None, new_content: str | None) -> None:
        stats = compute_stats(old_content, new_content)

        self.console.print("\n[cyan]Changes:[/cyan]")
        self.console.print(f"[green]  +{stats.additions} additions[/green]")
        self.console.print(f"[red]  -{stats.deletions} deletions[/red]")
        if stats.modifications > 0:
            self.console.print(f"[yellow]  ~{stats.modifications} modifications[/yellow]")

        diff_lines = generate_diff(old_content, new_content, PREVIEW_CONTEXT_LINES).split("\n")
        preview = "\n".join(diff_lines[:PREVIEW_LINES])

        self.console.print("\n[bright_black]Diff Preview:[/bright_black]")
        self.console.print(format_with_colors(preview))
        if len(diff_lines) > PREVIEW_LINES:
            self.console.print('[bright_black]... (use "v" to view full diff)[/bright_black]')
        self.console.print()

    def _show_full_diff(self, old_content: str | None, new_content: str | None) -> None:
        rule = "━" * 60
        self.console.print("\n[cyan]Full Diff:[/cyan]")
        self.console.print(f"[bright_black]{rule}[/bright_black]")
        self.console.print(format_with_colors(generate_diff(old_content, new_content)))
        self.console.print(f"[bright_black]{rule}[/bright_black]\n")
