"""Voice Command Interpreter - Free text to avatar commands.

Pure keyword rules, evaluated case-insensitively in priority order; the
first match wins. Interpretation never touches a session.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CommandKind(Enum):
    """What a recognized command does."""

    GESTURE = "gesture"
    EXPRESSION = "expression"


@dataclass(frozen=True)
class ParsedCommand:
    """A recognized voice command."""

    kind: CommandKind
    target: str


@dataclass(frozen=True)
class CommandRule:
    """Keywords that map to a command."""

    keywords: tuple[str, ...]
    command: ParsedCommand

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


COMMAND_RULES: tuple[CommandRule, ...] = (
    CommandRule(("wave", "hello"), ParsedCommand(CommandKind.GESTURE, "wave")),
    CommandRule(("smile",), ParsedCommand(CommandKind.EXPRESSION, "smile")),
    CommandRule(("thumbs up",), ParsedCommand(CommandKind.GESTURE, "thumbs-up")),
)

UNRECOGNIZED_MESSAGE = "Command not recognized"


class VoiceCommandInterpreter:
    """Matches free text against the command rules."""

    def __init__(self, rules: tuple[CommandRule, ...] = COMMAND_RULES) -> None:
        self._rules = rules

    def interpret(self, text: str) -> ParsedCommand | None:
        """Return the first matching command, or None."""
        normalized = text.lower()
        for rule in self._rules:
            if rule.matches(normalized):
                return rule.command
        return None
