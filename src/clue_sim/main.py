#!/usr/bin/env python
"""
Clue Deduction Simulator
Main entry point for playing or simulating a game of Clue.
"""

import os
import sys
import time
import random
import logging
from functools import partial

# Disable CrewAI tracing before importing crewai
os.environ["CREWAI_TRACING_ENABLED"] = "false"

from dotenv import load_dotenv

from clue_sim.config import Settings, load_settings
from clue_sim.controller import GameResult, Phase, TurnController
from clue_sim.crew import ModeratorDisplay, create_moderator
from clue_sim.display import ConsoleDisplay
from clue_sim.errors import ClueError
from clue_sim.loader import classic_game, import_game


# Load environment variables
load_dotenv()

# Configure logging for debugging
logging.basicConfig(
    level=logging.DEBUG if os.environ.get("CLUE_DEBUG") else logging.WARNING,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


USAGE = """Usage: clue-sim [play [FILE] | demo [NUM_PLAYERS] | help]
  (no command)   classic game: you against AI opponents
  play [FILE]    load a game definition (JSON); asks for the file if omitted
  demo [N]       all-AI classic game with N players (3-6, default: 6)
  help           show this message"""

# Turn cap for demo games when CLUE_MAX_TURNS is unset
DEMO_MAX_TURNS = 500


class EmptyAnnouncement(Exception):
    """The moderator answered without any text."""


def get_error_details(exception, model=None):
    """
    Describe why a moderator call failed.

    Args:
        exception: The exception raised by the call
        model: The moderator's LLM model, named in hints

    Returns:
        A one-line description, parts separated by " | "
    """
    parts = [f"{type(exception).__name__}: {exception}"]
    if exception.__cause__:
        parts.append(f"Caused by: {type(exception.__cause__).__name__}: {exception.__cause__}")

    status = getattr(exception, "status_code", None)
    if status is not None:
        parts.append(f"Status Code: {status}")
        if status in (401, 403):
            parts.append("Hint: check GOOGLE_API_KEY")
        elif status == 429:
            parts.append("Hint: the moderator is rate limited, try fewer games in a row")

    if isinstance(exception, EmptyAnnouncement):
        which = f"'{model}'" if model else "the moderator model"
        parts.append(f"Hint: {which} returned no text; check CLUE_LLM_MODEL or its safety settings")
    return " | ".join(parts)


def _announcement_text(result):
    if result is None:
        return ""
    return str(getattr(result, "raw", result) or "").strip()


def retry_with_backoff(func, max_retries=3, base_delay=5, sleep=time.sleep, model=None):
    """
    Call the moderator, retrying with exponential backoff.

    An empty announcement counts as a failure. Each retry is reported on
    stdout; the last failure is raised for the caller to report.

    Args:
        func: The call to make (a crew's kickoff)
        max_retries: Retries after the first attempt
        base_delay: Seconds before the first retry, doubled after each one
        sleep: Called with each delay
        model: The moderator's LLM model, named in error hints

    Returns:
        The first non-empty result
    """
    for attempt in range(max_retries + 1):
        try:
            result = func()
            if not _announcement_text(result):
                raise EmptyAnnouncement(f"Moderator returned an empty announcement ({type(result).__name__})")
            return result
        except Exception as e:
            logger.debug("Moderator attempt %d failed", attempt + 1, exc_info=True)
            if attempt == max_retries:
                raise
            delay = base_delay * (2 ** attempt)
            sys.stdout.write(f"\n⚠️ Moderator attempt {attempt + 1}/{max_retries + 1} failed: {get_error_details(e, model)}\n")
            sys.stdout.write(f"🔄 Asking the moderator again in {delay} seconds...\n")
            sys.stdout.flush()
            sleep(delay)


def build_display(settings: Settings) -> ConsoleDisplay:
    """Console display, narrated by the moderator when it is switched on."""
    if settings.moderator and not settings.google_api_key:
        sys.stdout.write("⚠️ CLUE_MODERATOR is set but GOOGLE_API_KEY is not; playing without a moderator.\n")
        sys.stdout.flush()
    if settings.moderator_enabled:
        return ModeratorDisplay(
            create_moderator(settings),
            retry=partial(retry_with_backoff, model=settings.llm_model),
        )
    return ConsoleDisplay()


def run_game(state, board, settings: Settings, display: ConsoleDisplay, rng: random.Random) -> GameResult:
    """
    Play a prepared game to the end and print the final results.

    Args:
        state: Initial game state
        board: The board the game is played on
        settings: Runtime options
        display: Where the game is shown and humans are asked
        rng: The game's random source

    Returns:
        How the game ended
    """
    if settings.ai_only:
        state.public.ai_only = True

    controller = TurnController(
        board,
        display=display,
        rng=rng,
        deduce_by_elimination=settings.deduce,
        max_turns=settings.max_turns,
    )
    result = controller.run(state)

    display.display_message("\n📊 FINAL RESULTS:")
    display.display_message("-" * 40)
    if result.outcome is Phase.WIN:
        display.display_message(f"Winner: {result.winner}")
    else:
        display.display_message(f"Winner: No one ({result.reason})")
    display.display_message(f"Total Turns: {result.turns}")
    display.display_message(f"Solution: {state.envelope}")
    return result


def run_classic(settings: Settings, display: ConsoleDisplay, num_players: int = 6, humans: int = 1):
    """Classic game on the bundled board."""
    rng = random.Random(settings.seed)
    state, board = classic_game(num_players, humans=humans, ai_only=settings.ai_only, rng=rng)
    return run_game(state, board, settings, display, rng)


def run_file(path, settings: Settings, display: ConsoleDisplay):
    """Game loaded from a JSON definition."""
    rng = random.Random(settings.seed)
    if not path:
        path = display.prompt_filename()
    state, board = import_game(path, rng)
    return run_game(state, board, settings, display, rng)


def run_demo(num_players: int, settings: Settings, display: ConsoleDisplay):
    """All-AI classic game, capped at DEMO_MAX_TURNS unless CLUE_MAX_TURNS says otherwise."""
    settings.ai_only = True
    if settings.max_turns is None:
        settings.max_turns = DEMO_MAX_TURNS
    return run_classic(settings, display, num_players=num_players, humans=0)


def main(argv=None):
    """Main entry point."""
    argv = sys.argv[1:] if argv is None else argv
    command = argv[0] if argv else None

    if command in ("help", "-h", "--help"):
        print(USAGE)
        return
    if command not in (None, "play", "demo"):
        print(USAGE)
        sys.exit(2)

    display = ConsoleDisplay()
    try:
        settings = load_settings()
        display = build_display(settings)
        if command == "play":
            run_file(argv[1] if len(argv) > 1 else None, settings, display)
        elif command == "demo":
            try:
                num_players = int(argv[1]) if len(argv) > 1 else 6
            except ValueError:
                print(USAGE)
                sys.exit(2)
            run_demo(num_players, settings, display)
        else:
            run_classic(settings, display)
    except ClueError as e:
        logger.debug("Game stopped with an error", exc_info=True)
        display.display_error(str(e))
        sys.exit(1)
    except (KeyboardInterrupt, EOFError):
        display.display_message("\n👋 Game abandoned.")
        sys.exit(130)


if __name__ == "__main__":
    main()
