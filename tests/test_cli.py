"""
Tests for the command-line entry point.
"""

import json
import sys

import pytest

import nl2latex.conversion
from nl2latex import cli
from nl2latex.models import ConversionResult, ConversionState
from nl2latex.utils.constants import EXAMPLE_PROMPTS, GENERIC_FAILURE_MESSAGE
from nl2latex.utils.errors import ErrorKind, MalformedReplyError, TransportError

RESULT = ConversionResult(
    latex="x = \\frac{-b \\pm \\sqrt{b^2-4ac}}{2a}",
    explanation="The quadratic formula.",
)


class StubClient:
    """Replaces ConversionClient inside cli.convert()."""

    result = RESULT
    error = None
    instances = []

    def __init__(self, config=None):
        self.config = config
        self.closed = False
        StubClient.instances.append(self)

    async def request(self, text):
        if self.error is not None:
            raise self.error
        return self.result

    async def close(self):
        self.closed = True


@pytest.fixture
def stub_client(monkeypatch):
    StubClient.result = RESULT
    StubClient.error = None
    StubClient.instances = []
    monkeypatch.setattr(nl2latex.conversion, "ConversionClient", StubClient)
    return StubClient


def run_main(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["nl2latex", *args])
    return cli.main()


class TestParser:
    def test_defaults(self):
        args = cli.create_parser().parse_args(["the quadratic formula"])

        assert args.description == "the quadratic formula"
        assert args.format == "text"
        assert args.png is None
        assert args.copy is False

    def test_options(self):
        args = cli.create_parser().parse_args(
            ["-f", "json", "-m", "some-model", "--png", "out.png", "x"]
        )

        assert args.format == "json"
        assert args.model == "some-model"
        assert str(args.png) == "out.png"

    def test_invalid_format(self):
        with pytest.raises(SystemExit):
            cli.create_parser().parse_args(["-f", "xml", "x"])


class TestFormatState:
    def test_json_success(self):
        output = json.loads(
            cli.format_state(ConversionState.succeeded(RESULT), "quadratic", "json")
        )

        assert output == {
            "description": "quadratic",
            "status": "succeeded",
            "latex": RESULT.latex,
            "explanation": RESULT.explanation,
        }

    def test_json_failure(self):
        state = ConversionState.failed(ErrorKind.PARSE)
        output = json.loads(cli.format_state(state, "quadratic", "json"))

        assert output["status"] == "failed"
        assert output["error"] == GENERIC_FAILURE_MESSAGE
        assert "latex" not in output

    def test_latex_only(self):
        assert cli.format_state(ConversionState.succeeded(RESULT), "q", "latex") == RESULT.latex

    def test_text(self):
        text = cli.format_state(ConversionState.succeeded(RESULT), "quadratic", "text")

        assert "Description: quadratic" in text
        assert f"LaTeX: {RESULT.latex}" in text
        assert "Explanation: The quadratic formula." in text


class TestMain:
    def test_converts_description(self, monkeypatch, capsys, stub_client):
        assert run_main(monkeypatch, "-f", "latex", "  the quadratic formula ") == 0

        assert capsys.readouterr().out.strip() == RESULT.latex
        assert stub_client.instances[0].closed is True

    def test_model_override(self, monkeypatch, capsys, stub_client):
        run_main(monkeypatch, "-m", "other-model", "x squared")

        assert stub_client.instances[0].config.model == "other-model"

    def test_failure_prints_generic_message(self, monkeypatch, capsys, stub_client):
        stub_client.error = MalformedReplyError("not json", reply="Sure!")

        assert run_main(monkeypatch, "x squared") == 1

        captured = capsys.readouterr()
        assert f"Error: {GENERIC_FAILURE_MESSAGE}" in captured.err
        assert "not json" not in captured.err

    def test_transport_detail_stays_off_the_console(self, monkeypatch, capsys, stub_client):
        """HTTP error bodies can carry key fragments; stderr only gets the kind."""
        stub_client.error = TransportError("HTTP 401: invalid x-api-key sk-ant-secret", status_code=401)

        assert run_main(monkeypatch, "x squared") == 1

        err = capsys.readouterr().err
        assert "sk-ant-secret" not in err
        assert "TRANSPORT" in err
        assert f"Error: {GENERIC_FAILURE_MESSAGE}" in err

    def test_verbose_shows_detail(self, monkeypatch, capsys, stub_client):
        stub_client.error = MalformedReplyError("not json")

        run_main(monkeypatch, "--verbose", "x squared")

        assert "not json" in capsys.readouterr().err

    def test_log_dir_keeps_full_detail(self, monkeypatch, capsys, stub_client, tmp_path):
        """The log file gets DEBUG records even when the console does not."""
        stub_client.error = MalformedReplyError("not json")

        assert run_main(monkeypatch, "--log-dir", str(tmp_path / "logs"), "x squared") == 1

        log_text = (tmp_path / "logs" / "nl2latex.log").read_text()
        assert "not json" in log_text
        assert "not json" not in capsys.readouterr().err

    def test_failure_json(self, monkeypatch, capsys, stub_client):
        stub_client.error = MalformedReplyError("not json")

        assert run_main(monkeypatch, "-f", "json", "x squared") == 1
        assert json.loads(capsys.readouterr().out)["status"] == "failed"

    def test_blank_description(self, monkeypatch, capsys, stub_client):
        assert run_main(monkeypatch, "   ") == 1

        assert "Nothing to convert" in capsys.readouterr().err
        assert stub_client.instances == []

    def test_examples(self, monkeypatch, capsys):
        assert run_main(monkeypatch, "--examples") == 0

        out = capsys.readouterr().out
        for example in EXAMPLE_PROMPTS:
            assert example in out

    def test_png_output(self, monkeypatch, capsys, stub_client, tmp_path):
        stub_client.result = ConversionResult(latex="x^2", explanation="")
        path = tmp_path / "out.png"

        assert run_main(monkeypatch, "--png", str(path), "x squared") == 0

        assert path.read_bytes().startswith(b"\x89PNG")
        assert f"Wrote {path}" in capsys.readouterr().err

    def test_png_render_error(self, monkeypatch, capsys, stub_client, tmp_path):
        stub_client.result = ConversionResult(latex="\\frac{1", explanation="")
        path = tmp_path / "out.png"

        assert run_main(monkeypatch, "--png", str(path), "broken") == 0

        assert not path.exists()
        assert "Render error" in capsys.readouterr().err
