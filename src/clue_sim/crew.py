"""
Clue Moderator Crew - optional LLM narration.
This module defines the CrewAI moderator that announces the start and the
end of a game. Game decisions never depend on it.
"""

import logging
from typing import Callable, Optional

from crewai import Agent, Crew, Process, Task

from clue_sim.config import Settings
from clue_sim.display import ConsoleDisplay

logger = logging.getLogger(__name__)


def create_moderator(settings: Settings) -> Agent:
    """The impartial game moderator."""
    return Agent(
        role="Clue Game Moderator",
        goal="Narrate a game of Clue for the players without revealing hidden information early",
        backstory=(
            "You are the butler of Tudor Mansion and have hosted many murder mystery "
            "evenings. You announce each game with flair and reveal the solution at the end."
        ),
        llm=settings.llm_model,
        allow_delegation=False,
        verbose=False,
    )


def create_moderator_announcement_crew(moderator: Agent, announcement_type: str, **kwargs) -> Crew:
    """
    Create a mini-crew for moderator announcements.

    Args:
        moderator: The moderator agent
        announcement_type: Type of announcement ('start' or 'end')
        **kwargs: Additional context for the announcement

    Returns:
        A crew for the moderator announcement
    """
    if announcement_type == "start":
        description = f"""
        Announce the start of the Clue game!

        Players: {kwargs.get('players', [])}

        Provide:
        1. A dramatic welcome to the mystery
        2. Introduction of all players and where they start
        3. Reminder of the objective (find suspect, weapon, and room)
        4. Reminder that accusations are made in the {kwargs.get('accusation_room', 'accusation room')}
        """
    elif announcement_type == "end":
        description = f"""
        Announce the end of the game!

        Winner: {kwargs.get('winner', 'Unknown')}
        Solution: {kwargs.get('solution', '?')}
        Total turns: {kwargs.get('total_turns', 0)}

        Provide a dramatic conclusion and reveal the solution!
        """
    else:
        description = "Provide a game status update."

    announcement_task = Task(
        description=description,
        expected_output="A clear and engaging announcement for the players.",
        agent=moderator,
    )

    return Crew(
        agents=[moderator],
        tasks=[announcement_task],
        process=Process.sequential,
        verbose=False,
        tracing=False,
    )


class ModeratorDisplay(ConsoleDisplay):
    """
    Console display that also lets the moderator announce the game.

    Args:
        moderator: CrewAI moderator agent
        retry: Wraps each kickoff (retry_with_backoff in the CLI)
    """

    def __init__(self, moderator: Agent, retry: Optional[Callable] = None, **kwargs):
        super().__init__(**kwargs)
        self.moderator = moderator
        self.retry = retry or (lambda func: func())
        self.turns_shown = 0

    def _announce(self, announcement_type: str, **kwargs) -> None:
        crew = create_moderator_announcement_crew(self.moderator, announcement_type, **kwargs)
        try:
            result = self.retry(crew.kickoff)
        except Exception as e:
            logger.debug("Moderator announcement failed", exc_info=True)
            self._write(f"\n⚠️ Could not announce game {announcement_type}: {e}")
            return
        self._write("\n📣 MODERATOR ANNOUNCEMENT:")
        self._write("-" * 40)
        self._write(str(result.raw if hasattr(result, "raw") else result))

    def display_start(self, state):
        super().display_start(state)
        self.turns_shown = 0
        self._announce(
            "start",
            players=[f"{p.suspect} ({p.kind.value}) at {p.location}" for p in state.players],
            accusation_room=state.public.accusation_room,
        )

    def print_turn(self, public, player):
        super().print_turn(public, player)
        self.turns_shown += 1

    def display_victory(self, state, winner):
        super().display_victory(state, winner)
        self._announce("end", winner=winner, solution=str(state.envelope), total_turns=self.turns_shown)

    def display_game_over(self, state, reason):
        super().display_game_over(state, reason)
        self._announce(
            "end",
            winner=f"No one ({reason})",
            solution=str(state.envelope),
            total_turns=self.turns_shown,
        )
