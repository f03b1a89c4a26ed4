"""Tests for the mailview command line."""

import io
import json
from unittest.mock import AsyncMock, patch

import pytest

from mailview.cli import (
    build_parser,
    count_cmd,
    inspect_cmd,
    main,
    resolve_config,
    standalone_document,
    styles_cmd,
)
from mailview.config import Config
from mailview.styles import STYLESHEET, STYLESHEET_VERSION
from mailview.transform import NO_CONTENT_HTML


@pytest.fixture
def body_file(tmp_path, newsletter_body):
    path = tmp_path / "body.html"
    path.write_text(newsletter_body, encoding="utf-8")
    return path


class TestParser:
    def test_render_defaults(self):
        args = build_parser().parse_args(["render"])
        assert args.input == "-"
        assert args.allow_remote is None
        assert args.standalone is False
        assert args.config is None

    def test_remote_flags(self):
        parser = build_parser()
        assert parser.parse_args(["render", "--allow-remote"]).allow_remote is True
        assert parser.parse_args(["render", "--block-remote"]).allow_remote is False

    def test_remote_flags_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["render", "--allow-remote", "--block-remote"])

    def test_serve_overrides(self):
        args = build_parser().parse_args(["serve", "--host", "0.0.0.0", "--port", "9000"])
        assert args.host == "0.0.0.0"
        assert args.port == 9000


class TestResolveConfig:
    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = resolve_config(None)
        assert config.render.allow_remote_default is False

    def test_picks_up_config_toml(self, sample_config_toml, monkeypatch):
        monkeypatch.chdir(sample_config_toml.parent)
        config = resolve_config(None)
        assert config.websocket.port == 19876

    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            resolve_config(tmp_path / "nope.toml")


class TestRenderCommand:
    def test_render_blocks_by_default(self, body_file, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        main(["render", str(body_file)])
        out = capsys.readouterr().out
        assert "Image blocked for privacy" in out
        assert "<script" not in out
        assert 'src="https://cdn.example.com/banner.png"' not in out

    def test_render_allow_remote(self, body_file, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        main(["render", "--allow-remote", str(body_file)])
        out = capsys.readouterr().out
        assert 'src="https://cdn.example.com/banner.png"' in out
        assert 'referrerpolicy="no-referrer"' in out

    def test_config_default_and_block_flag(self, body_file, sample_config_toml, capsys):
        main(["render", "-c", str(sample_config_toml), str(body_file)])
        assert 'src="https://cdn.example.com/banner.png"' in capsys.readouterr().out

        main(["render", "-c", str(sample_config_toml), "--block-remote", str(body_file)])
        assert 'src="https://cdn.example.com/banner.png"' not in capsys.readouterr().out

    def test_render_from_stdin(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("sys.stdin", io.StringIO("Hi & bye"))
        main(["render"])
        assert capsys.readouterr().out.strip() == "Hi &amp; bye"

    def test_render_empty(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("sys.stdin", io.StringIO(""))
        main(["render", "-"])
        assert capsys.readouterr().out.strip() == NO_CONTENT_HTML

    def test_standalone(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("sys.stdin", io.StringIO("<p>Hello</p>"))
        main(["render", "--standalone"])
        out = capsys.readouterr().out
        assert out.startswith("<!DOCTYPE html>")
        assert '<div class="email-content-display">' in out
        assert "Hello" in out

    def test_standalone_document(self):
        doc = standalone_document("<p>x</p>")
        assert STYLESHEET in doc
        assert doc.rstrip().endswith("</html>")


class TestOtherCommands:
    def test_count(self, body_file, capsys):
        count_cmd(str(body_file))
        assert capsys.readouterr().out.strip() == "5"

    def test_inspect_json(self, body_file, capsys):
        inspect_cmd(Config(), str(body_file), as_json=True)
        resources = json.loads(capsys.readouterr().out)
        assert len(resources) == 5
        assert resources[0]["kind"] == "image"
        assert resources[3]["category"] == "video"
        assert resources[4]["trusted"] is False

    def test_inspect_table(self, body_file, capsys):
        inspect_cmd(Config(), str(body_file))
        out = capsys.readouterr().out
        assert "youtube.com/embed/abc123" in out
        assert "Total: 5 resources" in out

    def test_inspect_nothing(self, tmp_path, capsys):
        path = tmp_path / "plain.txt"
        path.write_text("Just text")
        inspect_cmd(Config(), str(path))
        assert "No images or iframes found." in capsys.readouterr().out

    def test_styles(self, capsys):
        styles_cmd()
        out = capsys.readouterr().out
        assert f"v{STYLESHEET_VERSION}" in out
        assert ".mv-placeholder" in out


class TestMain:
    def test_no_command_shows_help(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 0
        assert "render" in capsys.readouterr().out

    def test_missing_config_exits(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["count", "-c", str(tmp_path / "missing.toml"), "-"])
        assert exc.value.code == 1

    def test_missing_input_exits(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(SystemExit) as exc:
            main(["count", str(tmp_path / "missing.html")])
        assert exc.value.code == 1

    def test_serve_applies_overrides(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with patch("mailview.cli.run_render_server", new_callable=AsyncMock) as mock_run:
            main(["serve", "--host", "0.0.0.0", "--port", "9100"])

        config = mock_run.call_args.args[0]
        assert config.websocket.host == "0.0.0.0"
        assert config.websocket.port == 9100
