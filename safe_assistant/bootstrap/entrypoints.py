"""
safe_assistant/bootstrap/entrypoints.py - Application entry points

Provides CLI and API entry points.
"""

from __future__ import annotations
from typing import List, Optional
import argparse
import asyncio
import json
import logging
import sys

from safe_assistant.assistant.scenarios import SCENARIOS

logger = logging.getLogger("bootstrap.entrypoints")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(logging.Formatter):
    def format(self, record):
        return json.dumps({
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        })


def setup_logging(level: str = "INFO", log_file: Optional[str] = None, json_format: bool = False) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
        json_format: Use JSON format for logs
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = JSONFormatter() if json_format else logging.Formatter(LOG_FORMAT)

    # Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.addHandler(console_handler)

    # File handler
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)


def _print_result(label: str, result, as_json: bool) -> None:
    if as_json:
        print(json.dumps({"scenario": label, "result": result.to_dict()}, indent=2))
        return

    line = "=" * 60
    print(f"\n{line}\n  {label}\n{line}")
    print(f"  User input: \"{result.user_text}\"")
    print(f"  Proposed:   {result.action.summary()}")
    print(f"  Decision:   {result.kind.value}")
    if result.outcome.deny_code:
        print(f"  Deny code:  {result.outcome.deny_code}")
    if result.audit is not None:
        print(f"  State:           {result.audit.state}")
        print(f"  Signature valid: {result.audit.signature_valid}")
        print(f"  Executed at:     {result.audit.executed_at}")
    print(f"\n  {result.explanation.text}")
    if result.explanation.drift_rejected:
        print("  [drift rejected]")


async def _run_cli(app, scenario_ids: List[str], text: Optional[str], as_json: bool) -> int:
    try:
        if text:
            result = await app.run_text(text)
            _print_result("Ad-hoc request", result, as_json)
        for scenario_id in scenario_ids:
            result = await app.run_scenario(scenario_id)
            _print_result(SCENARIOS[scenario_id].label, result, as_json)
    finally:
        await app.close()
    return 0


def cli_main(args: Optional[list] = None) -> int:
    """
    CLI entry point. Runs scenarios against the configured services.

    Args:
        args: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        description="Governed safe assistant demo",
        prog="safe-assistant",
    )

    parser.add_argument(
        "scenarios",
        nargs="*",
        help=f"Scenario ids to run: {', '.join(sorted(SCENARIOS))} (default: all)",
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
        default=None,
    )
    parser.add_argument(
        "-t", "--text",
        help="Run a single free-form request instead of scenarios",
        default=None,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Log level",
    )
    parser.add_argument(
        "--log-file",
        help="Log file path",
        default=None,
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format",
    )

    parsed = parser.parse_args(args)

    log_level = "DEBUG" if parsed.verbose else parsed.log_level
    setup_logging(level=log_level, log_file=parsed.log_file)

    scenario_ids = [s.lower() for s in parsed.scenarios]
    unknown = [s for s in scenario_ids if s not in SCENARIOS]
    if unknown:
        parser.error(f"unknown scenario(s): {', '.join(unknown)}")
    if not scenario_ids and not parsed.text:
        scenario_ids = sorted(SCENARIOS)

    try:
        from .app import AssistantApp

        app = AssistantApp(parsed.config)
        return asyncio.run(_run_cli(app, scenario_ids, parsed.text, parsed.json))

    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1


def api_main(args: Optional[list] = None) -> None:
    """
    API server entry point.

    Args:
        args: Command line arguments
    """
    parser = argparse.ArgumentParser(
        description="Safe assistant API server",
        prog="safe-assistant-api",
    )

    parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
        default=None,
    )
    parser.add_argument(
        "-p", "--port",
        type=int,
        help="API port",
        default=None,
    )
    parser.add_argument(
        "-H", "--host",
        help="API host",
        default=None,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level",
    )

    parsed = parser.parse_args(args)

    try:
        from .app import AssistantApp

        app = AssistantApp(parsed.config)
        logging_config = app.config.logging
        setup_logging(
            level=parsed.log_level or logging_config.level,
            log_file=logging_config.log_file,
            json_format=logging_config.json_logs,
        )

        # Override config with CLI args
        if parsed.port:
            app.config.api.port = parsed.port
        if parsed.host:
            app.config.api.host = parsed.host

        app.run_api()

    except KeyboardInterrupt:
        print("\nShutting down...")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


def main():
    """Main entry point for the package."""
    if len(sys.argv) > 1:
        command = sys.argv[1]

        if command == "api":
            api_main(sys.argv[2:])
        elif command == "cli":
            sys.exit(cli_main(sys.argv[2:]))
        elif command in ["-h", "--help"]:
            print("Governed safe assistant")
            print()
            print("Usage: safe-assistant <command> [options]")
            print()
            print("Commands:")
            print("  cli      Run demo scenarios (default)")
            print("  api      Start API server")
            print()
            print("Use '<command> --help' for command-specific help.")
        else:
            # Default to CLI with args
            sys.exit(cli_main(sys.argv[1:]))
    else:
        sys.exit(cli_main([]))


if __name__ == "__main__":
    main()
