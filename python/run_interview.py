#!/usr/bin/env python3
"""
Interactive Interview Console.

Drives an InterviewEngine from the terminal: slash commands control the
session and any other line is sent as the active candidate's chat message.
A background ticker auto-submits questions whose deadline has elapsed, and
every mutation is saved to the session snapshot file.

Usage:
    uv run python run_interview.py
    uv run python run_interview.py --state-file ./state.json --catalog ./my_catalog.json

Last Grunted: 10/18/2026
"""

from __future__ import annotations

import asyncio
import logging
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Final, Optional

from interview_catalog import default_catalog, load_catalog
from interview_engine import (
    ChatMessage,
    InterviewEngine,
    QuestionTicker,
    SessionStoreFile,
    StoreReadError,
    StoreWriteError,
)
from interview_engine.settings import load_runtime_config

# =============================================================================
# Logging Configuration
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger: logging.Logger = logging.getLogger(__name__)


# =============================================================================
# Exit Codes
# =============================================================================

EXIT_SUCCESS: Final[int] = 0
EXIT_CONFIG_ERROR: Final[int] = 1
EXIT_STATE_ERROR: Final[int] = 2
EXIT_INTERRUPTED: Final[int] = 130  # Standard SIGINT exit code


# =============================================================================
# Command Parsing
# =============================================================================

CONSOLE_COMMANDS: Final[frozenset[str]] = frozenset(
    {
        "upload",
        "new",
        "begin",
        "pause",
        "resume",
        "select",
        "list",
        "search",
        "status",
        "reset",
        "help",
        "quit",
    }
)

HELP_TEXT: Final[str] = """Commands:
  /upload <path>   Start a candidate from a PDF or DOCX resume
  /new             Start a candidate without a resume
  /begin           Begin the interview for the active candidate
  /pause           Pause the running question timer
  /resume          Resume a paused interview
  /select <id>     Switch the active candidate
  /list            List all candidates (most recent first)
  /search <text>   Filter candidates by name, email, phone or file name
  /status          Show the active candidate and timer
  /reset           Clear the active candidate and timer
  /quit            Exit
Anything else is sent as the candidate's message."""


@dataclass(frozen=True)
class ConsoleCommand:
    """One parsed console line. ``name == "say"`` means a chat message."""

    name: str
    argument: str = ""


def parse_command(line: str) -> Optional[ConsoleCommand]:
    """
    Parse a console line.

    Returns:
        None for a blank line, a slash command for a known ``/name``, and
        a ``say`` command carrying the text for anything else.
    """
    text = (line or "").strip()
    if not text:
        return None
    if text.startswith("/"):
        head, _, rest = text[1:].partition(" ")
        name = head.lower()
        if name in CONSOLE_COMMANDS:
            return ConsoleCommand(name=name, argument=rest.strip())
    return ConsoleCommand(name="say", argument=text)


def format_message(message: ChatMessage) -> str:
    return f"[{message.role.value}] {message.content}"


# =============================================================================
# Console Session
# =============================================================================


class ConsoleSession:
    """Applies parsed commands to an engine and echoes new transcript lines."""

    def __init__(self, engine: InterviewEngine, out: Callable[[str], None] = print) -> None:
        self._engine = engine
        self._out = out
        self._printed: dict[str, int] = {}

    def flush_transcript(self) -> None:
        """Print chat messages of the active candidate not shown yet."""
        candidate = self._engine.active_candidate
        if candidate is None:
            return
        start = self._printed.get(candidate.id, 0)
        for message in candidate.chat[start:]:
            self._out(format_message(message))
        self._printed[candidate.id] = len(candidate.chat)

    def handle(self, command: ConsoleCommand) -> bool:
        """
        Apply one command.

        Returns:
            False when the console should exit.
        """
        engine = self._engine
        name = command.name

        if name == "quit":
            return False
        if name == "help":
            self._out(HELP_TEXT)
        elif name == "say":
            if engine.active_candidate is None:
                self._out("No active candidate. Use /upload <path> or /new first.")
            engine.submit_message(command.argument)
        elif name == "upload":
            if not command.argument:
                self._out("Usage: /upload <path>")
            else:
                result = engine.start_candidate_from_resume(Path(command.argument).expanduser())
                if not result.ok:
                    self._out(f"Upload failed: {result.error}")
        elif name == "new":
            engine.start_candidate()
        elif name == "begin":
            engine.begin_interview()
        elif name == "pause":
            engine.pause_interview()
        elif name == "resume":
            engine.resume_interview()
        elif name == "select":
            if not command.argument:
                self._out("Usage: /select <id>")
            elif not engine.select_candidate(command.argument):
                self._out(f"Unknown candidate: {command.argument}")
        elif name in ("list", "search"):
            self._print_candidates(command.argument if name == "search" else "")
        elif name == "status":
            self._print_status()
        elif name == "reset":
            engine.reset_session()
            self._out("Session reset. Candidate records are kept.")

        self.flush_transcript()
        return True

    def _print_candidates(self, term: str) -> None:
        candidates = self._engine.search_candidates(term)
        if not candidates:
            self._out("No candidates.")
            return
        active_id = self._engine.active_candidate_id
        for candidate in candidates:
            marker = "*" if candidate.id == active_id else " "
            score = "-" if candidate.final_score is None else f"{candidate.final_score}/100"
            self._out(
                f"{marker} {candidate.id}  {candidate.profile.name or '(unnamed)'}  "
                f"{candidate.status.value}  {score}"
            )

    def _print_status(self) -> None:
        candidate = self._engine.active_candidate
        if candidate is None:
            self._out("No active candidate.")
            return
        self._out(f"Candidate: {candidate.profile.name or '(unnamed)'} ({candidate.id})")
        self._out(f"Status: {candidate.status.value}")
        question = self._engine.current_question
        if question is not None and candidate.questions:
            self._out(
                f"Question {self._engine.current_question_index + 1}/{len(candidate.questions)} "
                f"({question.difficulty.value}, {question.status.value})"
            )
        remaining = self._engine.seconds_remaining
        if remaining is not None:
            state = "paused" if self._engine.is_paused else "running"
            self._out(f"Timer: {max(0, remaining)}s ({state})")


# =============================================================================
# Main Loop
# =============================================================================


def _settle(future: "asyncio.Future[str]", line: Optional[str], error: Optional[BaseException]) -> None:
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(line)


async def read_line(input_fn: Callable[[str], str], prompt: str = "> ") -> str:
    """
    Read one line on a daemon thread.

    Cancelling the awaiting task abandons the reader; nothing joins it at
    loop shutdown.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[str] = loop.create_future()

    def _read() -> None:
        try:
            line = input_fn(prompt)
        except Exception as exc:
            error: Optional[BaseException] = exc
            line = None
        else:
            error = None
        if not loop.is_closed():
            loop.call_soon_threadsafe(_settle, future, line, error)

    threading.Thread(target=_read, name="console-input", daemon=True).start()
    return await future


async def run_console(
    engine: InterviewEngine,
    tick_seconds: float,
    input_fn: Callable[[str], str] = input,
) -> int:
    """Read commands until /quit or EOF while the ticker polls deadlines."""
    session = ConsoleSession(engine)
    ticker = QuestionTicker(engine, interval=tick_seconds, on_fire=session.flush_transcript)

    unfinished = engine.find_unfinished_candidate()
    if unfinished is not None:
        print(
            f"Welcome back! {unfinished.profile.name or 'A candidate'} has an unfinished "
            f"interview ({unfinished.status.value}). Use /select {unfinished.id} then /resume."
        )
        engine.mark_welcome_back_seen()

    session.flush_transcript()
    ticker.start()
    try:
        while True:
            try:
                line = await read_line(input_fn)
            except EOFError:
                break
            command = parse_command(line)
            if command is None:
                continue
            if not session.handle(command):
                break
    finally:
        await ticker.stop()
    return EXIT_SUCCESS


def main(
    state_file: str | None = None,
    catalog_path: str | None = None,
    tick_seconds: float | None = None,
    verbose: bool = False,
) -> int:
    """
    Main entry point for the interview console.

    Args:
        state_file: Snapshot path (overrides INTERVIEW_STATE_FILE).
        catalog_path: Question catalog path (overrides INTERVIEW_CATALOG_PATH).
        tick_seconds: Deadline polling interval (overrides INTERVIEW_TICK_SECONDS).
        verbose: Enable debug logging.

    Returns:
        Exit code indicating success or failure.
    """
    try:
        config = load_runtime_config()
    except RuntimeError as exc:
        logger.error("Invalid configuration: %s", exc)
        return EXIT_CONFIG_ERROR

    logging.getLogger().setLevel(logging.DEBUG if verbose else config.log_level)

    resolved_catalog = catalog_path or config.catalog_path
    resolved_tick = tick_seconds if tick_seconds is not None else config.tick_seconds
    if resolved_tick <= 0:
        logger.error("Tick interval must be positive. Got: %s", resolved_tick)
        return EXIT_CONFIG_ERROR

    try:
        catalog = load_catalog(resolved_catalog) if resolved_catalog else default_catalog()
    except RuntimeError as exc:
        logger.error("%s", exc)
        return EXIT_CONFIG_ERROR

    try:
        store_file = SessionStoreFile(Path(state_file).expanduser() if state_file else config.state_file)
        store = store_file.load()
    except (StoreReadError, StoreWriteError) as exc:
        logger.error("Cannot open session state: %s", exc)
        return EXIT_STATE_ERROR

    engine = InterviewEngine(store, catalog=catalog, on_change=store_file.save)
    logger.info(
        "Interview console ready (catalog=%s, state=%s, candidates=%d)",
        catalog.catalog_id,
        store_file.path,
        len(engine.candidates_ordered),
    )
    print(HELP_TEXT)

    try:
        return asyncio.run(run_console(engine, resolved_tick))
    except KeyboardInterrupt:
        logger.info("Console interrupted")
        return EXIT_INTERRUPTED
    except StoreWriteError as exc:
        logger.error("Failed to persist session state: %s", exc)
        return EXIT_STATE_ERROR


def cli() -> None:
    """Command-line interface entry point with argument parsing."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Run timed technical interviews from the terminal.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
    INTERVIEW_STATE_FILE     Session snapshot path (default: ./interview_state.json)
    INTERVIEW_CATALOG_PATH   Question catalog JSON (default: packaged fullstack catalog)
    INTERVIEW_TICK_SECONDS   Deadline polling interval in seconds (default: 1.0)
    LOG_LEVEL                Logging level (default: INFO)
        """,
    )
    parser.add_argument("--state-file", type=str, default=None, help="Session snapshot path.")
    parser.add_argument("--catalog", type=str, default=None, help="Question catalog JSON path.")
    parser.add_argument("--tick", type=float, default=None, help="Deadline polling interval (seconds).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()
    exit_code = main(
        state_file=args.state_file,
        catalog_path=args.catalog,
        tick_seconds=args.tick,
        verbose=args.verbose,
    )
    sys.exit(exit_code)


if __name__ == "__main__":
    cli()
