"""Tests for the CLI entry point (slidekit.cli).

Covers argument parsing, the read-only commands (layouts, inspect,
describe), deck validation, and the generate pipeline with QA gating.
The diagram compiler is replaced by a fake so no external tool runs.
"""

import io
import json
from unittest.mock import MagicMock, patch

import pytest
import yaml
from pptx import Presentation

from slidekit.cli import build_parser, cmd_generate, main

from conftest import FakeCompiler


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def parser():
    return build_parser()


@pytest.fixture
def deck_file(tmp_path):
    path = tmp_path / "deck.yaml"
    path.write_text(yaml.safe_dump({"slides": [
        {"layout": "emphasis-text", "data": {"emphasiseText": "Hello world"}},
        {"layout": "chart-with-caption",
         "data": {"chartType": "pie",
                  "data": [{"name": "A", "value": 1},
                           {"name": "B", "value": 3}]}},
        {"layout": "mermaid-with-caption"},
    ]}))
    return path


@pytest.fixture
def invalid_deck_file(tmp_path):
    path = tmp_path / "deck.json"
    path.write_text(json.dumps([
        {"layout": "column-items", "data": {"items": []}},
    ]))
    return path


@pytest.fixture(autouse=True)
def fake_diagrams():
    """Route every builder through the fake diagram compiler."""
    with patch("slidekit.generator.layouts.MermaidCliCompiler",
               return_value=FakeCompiler()):
        yield


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class TestParser:
    def test_generate_args(self, parser):
        args = parser.parse_args(["generate", "--deck", "d.yaml", "-o", "out.pptx",
                                  "--design", "design.yaml", "--skip-qa"])
        assert args.command == "generate"
        assert args.deck == "d.yaml"
        assert args.output == "out.pptx"
        assert args.design == "design.yaml"
        assert args.skip_qa is True
        assert args.force is False

    def test_generate_requires_output(self, parser):
        with pytest.raises(SystemExit):
            parser.parse_args(["generate", "--deck", "d.yaml"])

    def test_command_required(self, parser):
        with pytest.raises(SystemExit):
            parser.parse_args([])

    def test_log_level(self, parser):
        args = parser.parse_args(["--log-level", "DEBUG", "layouts"])
        assert args.log_level == "DEBUG"


# ---------------------------------------------------------------------------
# Read-only commands
# ---------------------------------------------------------------------------

class TestInfoCommands:
    def test_layouts(self, capsys):
        main(["layouts"])
        out = capsys.readouterr().out
        assert "chart-with-caption" in out
        assert "Mermaid With Caption" in out

    def test_inspect(self, capsys):
        main(["inspect", "--layout", "column-items"])
        out = capsys.readouterr().out
        assert "Layout:  column-items (Column Items)" in out
        assert "items" in out

    def test_inspect_yaml(self, capsys):
        main(["inspect", "--layout", "emphasis-text", "--yaml"])
        data = yaml.safe_load(capsys.readouterr().out)
        assert data["layout_id"] == "emphasis-text"

    def test_inspect_unknown(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["inspect", "--layout", "nope"])
        assert exc_info.value.code == 1
        assert "Unknown layout" in capsys.readouterr().err

    def test_describe(self, capsys):
        main(["describe"])
        described = json.loads(capsys.readouterr().out)
        assert len(described) == 7


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------

class TestValidateCommand:
    def test_valid_deck(self, deck_file, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["validate", "--deck", str(deck_file)])
        assert exc_info.value.code == 0
        assert "QA PASS" in capsys.readouterr().out

    def test_invalid_deck(self, invalid_deck_file, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["validate", "--deck", str(invalid_deck_file)])
        assert exc_info.value.code == 1
        assert "items: constraint-violated" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["validate", "--deck", str(tmp_path / "none.yaml")])
        assert exc_info.value.code == 1
        assert "Deck file not found" in capsys.readouterr().err

    def test_malformed_file(self, tmp_path, capsys):
        path = tmp_path / "deck.yaml"
        path.write_text("slides: 5\n")
        with pytest.raises(SystemExit):
            main(["validate", "--deck", str(path)])
        assert "Could not read deck" in capsys.readouterr().err

    def test_yaml_syntax_error(self, tmp_path, capsys):
        path = tmp_path / "deck.yaml"
        path.write_text("slides: [\n  - layout: x\n   bad: : :\n")
        with pytest.raises(SystemExit) as exc_info:
            main(["validate", "--deck", str(path)])
        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "Could not read deck" in err
        assert "Invalid YAML" in err


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------

class TestGenerateCommand:
    def test_writes_pptx(self, deck_file, tmp_path, capsys):
        output = tmp_path / "out" / "deck.pptx"
        main(["generate", "--deck", str(deck_file), "-o", str(output)])
        prs = Presentation(io.BytesIO(output.read_bytes()))
        assert len(prs.slides) == 3
        err = capsys.readouterr().err
        assert "QA PASS" in err
        assert "Written:" in err

    def test_invalid_data_exits(self, invalid_deck_file, tmp_path, capsys):
        output = tmp_path / "deck.pptx"
        with pytest.raises(SystemExit) as exc_info:
            main(["generate", "--deck", str(invalid_deck_file), "-o", str(output)])
        assert exc_info.value.code == 1
        assert "Invalid slide data: slides[0] (column-items)" in capsys.readouterr().err
        assert not output.exists()

    def test_custom_design(self, deck_file, tmp_path):
        design = tmp_path / "design.yaml"
        design.write_text("dimensions:\n  width_inches: 10.0\n  height_inches: 7.5\n")
        output = tmp_path / "deck.pptx"
        main(["generate", "--deck", str(deck_file), "-o", str(output),
              "--design", str(design), "--skip-qa"])
        prs = Presentation(io.BytesIO(output.read_bytes()))
        assert prs.slide_width.inches == pytest.approx(10.0)

    def test_missing_design(self, deck_file, tmp_path, capsys):
        with pytest.raises(SystemExit):
            main(["generate", "--deck", str(deck_file), "-o",
                  str(tmp_path / "x.pptx"), "--design", str(tmp_path / "no.yaml")])
        assert "Design file not found" in capsys.readouterr().err

    @pytest.mark.parametrize("content", [
        "colors: [\n  bad: : :\n",
        "- just\n- a list\n",
        "dimensions: 10\n",
    ])
    def test_unreadable_design(self, deck_file, tmp_path, capsys, content):
        design = tmp_path / "design.yaml"
        design.write_text(content)
        output = tmp_path / "x.pptx"
        with pytest.raises(SystemExit) as exc_info:
            main(["generate", "--deck", str(deck_file), "-o", str(output),
                  "--design", str(design)])
        assert exc_info.value.code == 1
        assert "Could not read design" in capsys.readouterr().err
        assert not output.exists()


@pytest.fixture
def qa_fail():
    qa = MagicMock()
    qa.passed = False
    qa.summary.return_value = "QA FAIL: 1 error(s), 0 warning(s)"
    qa.report.return_value = "QA FAIL: 1 error(s), 0 warning(s)\n  [ERROR] deck: x"
    return qa


class TestQAGating:
    def _args(self, deck_file, output, **overrides):
        args = build_parser().parse_args(
            ["generate", "--deck", str(deck_file), "-o", str(output)])
        for key, value in overrides.items():
            setattr(args, key, value)
        return args

    def test_qa_failure_blocks_write(self, deck_file, tmp_path, qa_fail, capsys):
        output = tmp_path / "deck.pptx"
        with patch("slidekit.cli.QAValidator") as validator_cls:
            validator_cls.return_value.validate.return_value = qa_fail
            with pytest.raises(SystemExit):
                cmd_generate(self._args(deck_file, output))
        assert not output.exists()
        assert "--force" in capsys.readouterr().err

    def test_force_writes_anyway(self, deck_file, tmp_path, qa_fail, capsys):
        output = tmp_path / "deck.pptx"
        with patch("slidekit.cli.QAValidator") as validator_cls:
            validator_cls.return_value.validate.return_value = qa_fail
            cmd_generate(self._args(deck_file, output, force=True, verbose=True))
        assert output.exists()
        assert "[ERROR] deck: x" in capsys.readouterr().err

    def test_skip_qa(self, deck_file, tmp_path, capsys):
        output = tmp_path / "deck.pptx"
        with patch("slidekit.cli.QAValidator") as validator_cls:
            cmd_generate(self._args(deck_file, output, skip_qa=True))
        validator_cls.assert_not_called()
        assert output.exists()
        assert "QA validation skipped" in capsys.readouterr().err
