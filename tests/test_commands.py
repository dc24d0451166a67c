"""Tests for the voice command interpreter."""

import pytest

from studio.orchestrator.commands import (
    CommandKind,
    ParsedCommand,
    VoiceCommandInterpreter,
)


@pytest.fixture
def interpreter():
    return VoiceCommandInterpreter()


class TestVoiceCommandInterpreter:
    """Keyword matching is case-insensitive and first match wins."""

    @pytest.mark.parametrize("text", ["wave", "Wave at them", "HELLO class"])
    def test_wave(self, interpreter, text):
        assert interpreter.interpret(text) == ParsedCommand(CommandKind.GESTURE, "wave")

    def test_smile(self, interpreter):
        assert interpreter.interpret("Smile please") == ParsedCommand(
            CommandKind.EXPRESSION, "smile"
        )

    def test_thumbs_up(self, interpreter):
        assert interpreter.interpret("Give a Thumbs Up") == ParsedCommand(
            CommandKind.GESTURE, "thumbs-up"
        )

    def test_priority_order(self, interpreter):
        """wave outranks smile when both appear."""
        command = interpreter.interpret("smile and wave")

        assert command.target == "wave"

    @pytest.mark.parametrize("text", ["", "thumbs", "jump around"])
    def test_unrecognized(self, interpreter, text):
        assert interpreter.interpret(text) is None
