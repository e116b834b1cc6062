"""
CLI Tests - argument parsing and command dispatch

© 2025 Sven Kalinowski with small help of Lino Casu
Licensed under the Anti-Capitalist Software License v1.4
"""
import io
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from docx import Document

import logging_config
from ai_service import AIResult
from cli import build_parser, main
from conftest import truncated_document_docx
from settings import API_KEY_ENV, HOME_ENV, load_settings


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv(HOME_ENV, str(tmp_path / "home"))
    monkeypatch.delenv(API_KEY_ENV, raising=False)
    monkeypatch.setattr(logging_config, "setup_logging", lambda *args, **kwargs: tmp_path)
    return tmp_path


class TestParser:
    def test_fix_arguments(self):
        args = build_parser().parse_args(["fix", "notes.txt", "-o", "out.txt"])
        assert args.command == "fix"
        assert args.input == "notes.txt"
        assert args.output == "out.txt"

    def test_config_value_optional(self):
        args = build_parser().parse_args(["config", "show"])
        assert args.value is None

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()


class TestTextCommands:
    def test_fix_to_stdout(self, tmp_path, capsys):
        source = tmp_path / "notes.txt"
        source.write_text("hôm nay trời đẹp. tôi đi học.\n• mục một", encoding="utf-8")

        assert main(["fix", str(source)]) == 0
        out = capsys.readouterr().out
        assert out == "Hôm nay trời đẹp. Tôi đi học.\n- Mục một\n"

    def test_fix_to_file(self, tmp_path):
        source = tmp_path / "notes.txt"
        source.write_text("xin chào", encoding="utf-8")
        output = tmp_path / "fixed.txt"

        assert main(["fix", str(source), "-o", str(output)]) == 0
        assert output.read_text(encoding="utf-8") == "Xin chào"

    def test_missing_file(self, tmp_path, capsys):
        assert main(["fix", str(tmp_path / "nope.txt")]) == 1
        assert "[ERROR]" in capsys.readouterr().err

    def test_stats(self, tmp_path, capsys):
        source = tmp_path / "notes.txt"
        source.write_text("xin chào bạn", encoding="utf-8")

        assert main(["stats", str(source)]) == 0
        out = capsys.readouterr().out
        assert "Characters: 12" in out
        assert "Words: 3" in out

    def test_extract_docx(self, tmp_path, sample_docx, capsys):
        source = tmp_path / "report.docx"
        source.write_bytes(sample_docx)

        assert main(["extract", str(source)]) == 0
        assert capsys.readouterr().out.startswith("• hôm nay trời đẹp.\n")


class TestDocxCommands:
    def test_fix_docx_default_output(self, tmp_path, sample_docx, capsys):
        source = tmp_path / "report.docx"
        source.write_bytes(sample_docx)

        assert main(["fix-docx", str(source)]) == 0
        output = tmp_path / "report_fixed.docx"
        assert output.exists()
        assert Document(str(output)).paragraphs[2].text == "Đoạn văn bình thường"
        assert "Paragraphs corrected: 4" in capsys.readouterr().out

    def test_fix_docx_corrupt(self, tmp_path):
        source = tmp_path / "broken.docx"
        source.write_bytes(b"not a zip")
        assert main(["fix-docx", str(source)]) == 1

    def test_to_docx_normalizes(self, tmp_path):
        source = tmp_path / "notes.txt"
        source.write_text("BÁO CÁO TUẦN\nnội dung chính", encoding="utf-8")

        assert main(["to-docx", str(source)]) == 0
        doc = Document(str(tmp_path / "notes_fixed.docx"))
        texts = [p.text for p in doc.paragraphs]
        assert texts == ["BÁO CÁO TUẦN", "Nội dung chính"]

    def test_fix_docx_malformed_xml(self, tmp_path, capsys):
        source = tmp_path / "broken.docx"
        source.write_bytes(truncated_document_docx())

        assert main(["fix-docx", str(source)]) == 1
        assert "[ERROR]" in capsys.readouterr().err

    def test_to_docx_stdin_needs_output(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("sys.stdin", io.StringIO("xin chào"))

        assert main(["to-docx", "-"]) == 1
        assert "-o" in capsys.readouterr().err
        assert not list(tmp_path.glob("*.docx"))

    def test_to_docx_stdin_with_output(self, tmp_path, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("xin chào"))
        output = tmp_path / "out.docx"

        assert main(["to-docx", "-", "-o", str(output)]) == 0
        assert Document(str(output)).paragraphs[0].text == "Xin chào"

    def test_to_docx_ai_model_goes_to_stderr(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv(API_KEY_ENV, "env-key")
        source = tmp_path / "notes.txt"
        source.write_text("xin chào", encoding="utf-8")

        with patch("ai_service.fix_text_with_ai", return_value=AIResult("Xin chào.", "gemini-2.5-flash")):
            assert main(["to-docx", str(source), "--ai"]) == 0

        captured = capsys.readouterr()
        assert "Model used: gemini-2.5-flash" in captured.err
        assert "Model used" not in captured.out

    def test_to_docx_ai_needs_key(self, tmp_path):
        source = tmp_path / "notes.txt"
        source.write_text("xin chào", encoding="utf-8")
        assert main(["to-docx", str(source), "--ai"]) == 1


class TestSettingsCommands:
    def test_set_model(self):
        assert main(["config", "set-model", "gemini-2.5-flash"]) == 0
        assert load_settings().model == "gemini-2.5-flash"

    def test_set_unknown_model(self):
        assert main(["config", "set-model", "bad"]) == 1

    def test_set_key_requires_value(self):
        assert main(["config", "set-key"]) == 1

    def test_show_masks_key(self, capsys):
        main(["config", "set-key", "abcd-secret-wxyz"])
        capsys.readouterr()

        assert main(["config", "show"]) == 0
        out = capsys.readouterr().out
        assert "abcd...wxyz" in out
        assert "secret" not in out

    def test_models_marks_current(self, capsys):
        assert main(["models"]) == 0
        out = capsys.readouterr().out
        assert "* gemini-3-flash-preview" in out

    def test_ai_fix_uses_stored_key(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv(API_KEY_ENV, "env-key")
        source = tmp_path / "notes.txt"
        source.write_text("xin chào", encoding="utf-8")

        with patch("ai_service.fix_text_with_ai", return_value=AIResult("Xin chào.", "gemini-2.5-flash")) as fix:
            assert main(["ai-fix", str(source)]) == 0

        assert fix.call_args.args[1] == "env-key"
        assert capsys.readouterr().out == "Xin chào.\n"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
