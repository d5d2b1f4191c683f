"""
Exception types for the Clue simulator.

Invariant errors mean the engine reached a state it should never reach
(a logic bug, not a user mistake). They are raised where detected and only
caught at the top level, which reports them and stops the run.
"""


class ClueError(Exception):
    """Base class for all simulator errors."""


class InvariantError(ClueError):
    """A game invariant was violated (empty ring, unknown player, bad belief transition...)."""


class GameDefinitionError(ClueError):
    """A game definition could not be loaded."""
