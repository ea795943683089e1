import json
from pathlib import Path

import pytest

from commander.commands import load_commands
from commander.compiler import ActionCompiler
from commander.directory import StaticDestinationDirectory
from commander.llm_extractor import Completion, LLMIntentExtractor
from commander.main import CommandOrchestrator
from commander.models import DestinationEntry

COMMANDS_FILE = Path(__file__).parent.parent / "commander" / "commands.yml"


class FakeCompletion:
    """Completion service double: returns canned content or raises."""

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []
        self.model = "fake-model"

    def complete(self, system_prompt, user_prompt):
        self.calls.append((system_prompt, user_prompt))
        if self.error is not None:
            raise self.error
        content = self.content if isinstance(self.content, str) or self.content is None else json.dumps(self.content)
        return Completion(content=content, model=self.model, usage={"total_tokens": 42})


class FailingDirectory:
    def __init__(self):
        self.calls = 0

    def list_active_destinations(self):
        self.calls += 1
        raise ConnectionError("firestore unavailable")


@pytest.fixture
def navigation():
    return load_commands(COMMANDS_FILE)


@pytest.fixture
def destinations():
    return [
        DestinationEntry(id="d1", name="Aparecida do Norte"),
        DestinationEntry(id="d2", name="Gramado Natal Luz"),
    ]


@pytest.fixture
def directory(destinations):
    return StaticDestinationDirectory(destinations)


@pytest.fixture
def failing_directory():
    return FailingDirectory()


@pytest.fixture
def fake_completion():
    return FakeCompletion


@pytest.fixture
def make_orchestrator(navigation, directory):
    def _make(content=None, error=None, directory_override=None):
        completion = FakeCompletion(content=content, error=error)
        orchestrator = CommandOrchestrator(
            extractor=LLMIntentExtractor(completion=completion, navigation=navigation),
            directory=directory_override if directory_override is not None else directory,
            compiler=ActionCompiler(trigger="/"),
            trigger="/",
        )
        return orchestrator, completion
    return _make
