"""Tests for log file setup and analysis."""
import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from logging_config import (
    MAX_LOG_FILES,
    analyze_log,
    get_latest_log,
    parse_log_line,
    setup_logging,
)

SAMPLE_LOG = (
    "2025-01-01 12:00:00 | INFO | vietcorrect.docx | Corrected DOCX written to out.docx\n"
    "2025-01-01 12:00:01 | WARNING | vietcorrect.settings | Ignoring unreadable settings file\n"
    "2025-01-01 12:00:02 | ERROR | vietcorrect.cli | fix failed: a | b\n"
    "Traceback (most recent call last):\n"
    "2025-01-01 12:00:03 | DEBUG | vietcorrect.docx | Removed numbering reference\n"
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetup:
    def test_creates_log_file(self, tmp_path, restore_root_logger):
        log_file = setup_logging(logging.WARNING, log_dir=tmp_path)
        logging.getLogger("vietcorrect.test").info("Corrected 3 paragraphs")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert log_file.parent == tmp_path
        assert get_latest_log(tmp_path) == log_file
        record = parse_log_line(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert record["module"] == "vietcorrect.test"
        assert record["message"] == "Corrected 3 paragraphs"

    def test_prunes_old_files(self, tmp_path, restore_root_logger):
        for i in range(MAX_LOG_FILES + 5):
            (tmp_path / f"vietcorrect_20200101_{i:06d}.log").write_text("", encoding="utf-8")

        setup_logging(log_dir=tmp_path)
        assert len(list(tmp_path.glob("vietcorrect_*.log"))) == MAX_LOG_FILES
        assert not (tmp_path / "vietcorrect_20200101_000000.log").exists()


class TestAnalysis:
    def test_no_logs(self, tmp_path):
        assert get_latest_log(tmp_path) is None
        assert analyze_log(tmp_path / "missing.log") == {"error": "No log file found"}

    def test_parse_line(self):
        assert parse_log_line("Traceback (most recent call last):") is None
        record = parse_log_line("2025-01-01 12:00:02 | ERROR | vietcorrect.cli | a | b\n")
        assert record == {
            "time": "2025-01-01 12:00:02",
            "level": "ERROR",
            "module": "vietcorrect.cli",
            "message": "a | b",
        }

    def test_summary(self, tmp_path):
        log_file = tmp_path / "vietcorrect_20250101_120000.log"
        log_file.write_text(SAMPLE_LOG, encoding="utf-8")

        analysis = analyze_log(log_file)
        assert analysis["error_count"] == 1
        assert analysis["warning_count"] == 1
        assert analysis["errors"][0]["message"] == "fix failed: a | b"
        assert analysis["modules"] == {
            "vietcorrect.docx": 2, "vietcorrect.settings": 1, "vietcorrect.cli": 1
        }
        assert [e["event"][:9] for e in analysis["timeline"]] == ["Corrected", "fix faile"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
