"""
agentgate command line.

    agentgate <project-path> <task> [--brave | --interactive] [--user ID]
              [--mcp-url URL] [--max-iterations N] [--verbose]

Safe mode is the default. Configuration comes from the environment (see
agentgate.config); flags override individual values.
"""

import argparse
import logging
import sys

from rich.console import Console
from rich.markup import escape

from agentgate import __version__
from agentgate.agent_loop import IterationLimitExceeded
from agentgate.assembly import ConfirmationMode, create_agent_runtime
from agentgate.config import AgentConfig, normalize_mcp_url
from agentgate.llm import LLMError

logger = logging.getLogger(__name__)

RULE = "═" * 60


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agentgate",
        description="Tool-calling coding agent with confirmation-gated side effects",
    )
    parser.add_argument("project_path", help="Project directory the agent works on")
    parser.add_argument("task", help="Task description for the agent")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--brave", action="store_true",
                      help="Auto-approve every file write and shell command")
    mode.add_argument("--interactive", action="store_true",
                      help="Review each file write and shell command before it runs")

    parser.add_argument("--user", metavar="ID", help="User identifier shown in the banner")
    parser.add_argument("--mcp-url", metavar="URL",
                        help="MCP server URL (overrides MCP_SERVER_URL)")
    parser.add_argument("--max-iterations", type=int, metavar="N",
                        help="Maximum completion requests per run (overrides AGENT_MAX_ITERATIONS)")
    parser.add_argument("--verbose", action="store_true", help="Enable INFO logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def selected_mode(args: argparse.Namespace) -> ConfirmationMode:
    if args.brave:
        return ConfirmationMode.BRAVE
    if args.interactive:
        return ConfirmationMode.INTERACTIVE
    return ConfirmationMode.SAFE


def load_config(args: argparse.Namespace) -> AgentConfig:
    config = AgentConfig.from_env()
    if args.mcp_url:
        config.mcp.server_url = normalize_mcp_url(args.mcp_url)
    if args.max_iterations is not None:
        config.loop.max_iterations = args.max_iterations
    return config


def print_banner(console: Console, args: argparse.Namespace, mode: ConfirmationMode) -> None:
    console.print(f"[cyan]{RULE}[/cyan]")
    console.print("[cyan]agentgate[/cyan]")
    console.print(f"[cyan]{RULE}[/cyan]")
    console.print(f"[bright_black]Project: {escape(args.project_path)}[/bright_black]")
    console.print(f"[bright_black]Task: {escape(args.task)}[/bright_black]")
    console.print(f"[bright_black]Mode: {mode.value.capitalize()}[/bright_black]")
    if args.user:
        console.print(f"[bright_black]User: {escape(args.user)}[/bright_black]")
    console.print(f"[cyan]{RULE}[/cyan]")
    console.print()

    if mode is ConfirmationMode.BRAVE:
        console.print("[yellow]Brave mode enabled - all operations will be auto-approved[/yellow]")
    elif mode is ConfirmationMode.INTERACTIVE:
        console.print("[cyan]Interactive mode enabled - you will review changes before approval[/cyan]")


def main(argv: list[str] | None = None, console: Console | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    console = console or Console()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args)
    if not config.llm.api_key:
        console.print("[red]ERROR: LLM_API_KEY (or OPENAI_API_KEY) environment variable not set[/red]")
        console.print("Please set it in your environment")
        return 1

    if args.max_iterations is not None and args.max_iterations < 1:
        console.print("[red]ERROR: --max-iterations must be at least 1[/red]")
        return 1

    mode = selected_mode(args)
    print_banner(console, args, mode)

    console.print(f"[bright_black]\\[MCP] Checking server at {escape(config.mcp.server_url)}...[/bright_black]")
    runtime = create_agent_runtime(args.project_path, config, mode=mode, console=console)

    with runtime:
        if runtime.remote_tool_names:
            names = ", ".join(runtime.remote_tool_names)
            console.print(f"[green]\\[MCP] Discovered {len(runtime.remote_tool_names)} tools: {escape(names)}[/green]")
        else:
            console.print("[yellow]\\[MCP] No MCP server available - using local tools only[/yellow]")
        console.print(f"\n[bright_black]\\[Agent] Total tools available: {len(runtime.registry)}[/bright_black]\n")
        console.print("[cyan]\\[Agent] Starting task execution...[/cyan]\n")

        try:
            result = runtime.run(args.project_path, args.task)
        except (IterationLimitExceeded, LLMError) as e:
            console.print()
            console.print(f"[red]{RULE}[/red]")
            console.print("[red]Error[/red]")
            console.print(f"[red]{RULE}[/red]")
            console.print(escape(str(e)))
            return 1

    console.print()
    console.print(f"[cyan]{RULE}[/cyan]")
    console.print("[green]Task Completed[/green]")
    console.print(f"[cyan]{RULE}[/cyan]")
    console.print()
    console.print(escape(result))
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
