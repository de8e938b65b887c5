"""
tests/unit/test_entrypoints.py - CLI entry point tests
"""

import json
import logging

import pytest

from safe_assistant.assistant.turn import run_scenario, run_turn
from safe_assistant.assistant.scenarios import get_scenario
from safe_assistant.bootstrap import app as app_module
from safe_assistant.bootstrap.entrypoints import JSONFormatter, cli_main, setup_logging
from safe_assistant.llm.services.explanation_service import ExplanationService
from safe_assistant.llm.services.proposal_service import ProposalService


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


class FakeApp:
    """Stands in for AssistantApp with injected services."""

    instances = []

    def __init__(self, config_file=None, llm=None, gateway=None):
        self.config_file = config_file
        self.proposer = ProposalService(llm=llm)
        self.explainer = ExplanationService(llm=llm)
        self.gateway = gateway
        self.ran = []
        self.closed = False
        FakeApp.instances.append(self)

    async def run_text(self, user_text):
        self.ran.append(user_text)
        return await run_turn(user_text, self.proposer, self.gateway, self.explainer, "cli-test")

    async def run_scenario(self, scenario_id):
        self.ran.append(scenario_id)
        return await run_scenario(
            get_scenario(scenario_id), self.proposer, self.gateway, self.explainer, "cli-test"
        )

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_app(monkeypatch, scripted_llm_factory, gateway_client):
    FakeApp.instances = []

    def factory(config_file=None):
        return FakeApp(config_file, llm=scripted_llm_factory(), gateway=gateway_client)

    monkeypatch.setattr(app_module, "AssistantApp", factory)
    return FakeApp


class TestCLI:
    """Tests for cli_main."""

    def test_unknown_scenario_rejected(self):
        with pytest.raises(SystemExit) as exc_info:
            cli_main(["zz"])

        assert exc_info.value.code == 2

    def test_runs_all_scenarios_by_default(self, fake_app, capsys):
        assert cli_main([]) == 0

        app = fake_app.instances[0]
        assert app.ran == ["a", "b", "c", "d"]
        assert app.closed
        assert "Scenario D: Replay Attack" in capsys.readouterr().out

    def test_selected_scenario_json(self, fake_app, capsys):
        assert cli_main(["A", "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["scenario"] == "Scenario A: Happy Path"
        assert data["result"]["kind"] == "ALLOW"

    def test_free_text(self, fake_app, capsys):
        assert cli_main(["--text", "Pay $20 to test account"]) == 0

        assert fake_app.instances[0].ran == ["Pay $20 to test account"]
        assert "Decision:   ALLOW" in capsys.readouterr().out

    def test_config_path_forwarded(self, fake_app):
        cli_main(["a", "-c", "custom.json"])

        assert fake_app.instances[0].config_file == "custom.json"


class TestLogging:
    """Tests for setup_logging."""

    def test_levels(self):
        setup_logging(level="debug")

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_json_formatter(self):
        record = logging.LogRecord("narration.tts", logging.INFO, __file__, 1, "hello %s", ("world",), None)

        data = json.loads(JSONFormatter().format(record))

        assert data["logger"] == "narration.tts"
        assert data["level"] == "INFO"
        assert data["message"] == "hello world"

    def test_log_file(self, tmp_path):
        path = tmp_path / "assistant.log"
        setup_logging(level="INFO", log_file=str(path))

        logging.getLogger("bootstrap.test").info("written")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "written" in path.read_text()
