import threading

import pytest

import app
from profile_rag.exceptions import ConfigurationError


def test_runner_configuration_error_starts_no_loop_thread(monkeypatch):
    def broken():
        raise ConfigurationError("Groq backend needs GROQ_API_KEY")

    monkeypatch.setattr(app.ProfileAssistant, "from_settings", staticmethod(broken))
    before = threading.active_count()

    for _ in range(3):
        with pytest.raises(ConfigurationError):
            app.AssistantRunner()

    assert threading.active_count() == before


def test_runner_executes_coroutines_on_its_loop(monkeypatch):
    sentinel = object()
    monkeypatch.setattr(app.ProfileAssistant, "from_settings", staticmethod(lambda: sentinel))

    runner = app.AssistantRunner()

    async def answer():
        return 42

    try:
        assert runner.assistant is sentinel
        assert runner.run(answer()) == 42
    finally:
        runner.loop.call_soon_threadsafe(runner.loop.stop)
