"""
Logging Configuration for VietCorrect

One log file per CLI run under ~/.vietcorrect/logs (override with
VIETCORRECT_LOG_DIR). Older files beyond MAX_LOG_FILES are pruned.

© 2025 Sven Kalinowski with small help of Lino Casu
Licensed under the Anti-Capitalist Software License v1.4
"""
import logging
import os
import re
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

LOG_DIR = Path(os.environ.get("VIETCORRECT_LOG_DIR") or Path.home() / ".vietcorrect" / "logs")
LOG_PREFIX = "vietcorrect_"
MAX_LOG_FILES = 20

FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Inverse of FILE_FORMAT; the message may itself contain " | "
RECORD_LINE = re.compile(
    r'^(?P<time>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}) \| (?P<level>[A-Z]+) \| '
    r'(?P<module>[\w.]+) \| (?P<message>.*)$'
)

# Messages worth showing in the timeline
TIMELINE_KEYWORDS = ("corrected", "extracted", "created", "written", "failed", "model used")

logger = logging.getLogger("vietcorrect.logging")

QUIET_LOGGERS = (
    "urllib3", "requests", "httpx", "httpcore", "multipart",
    "python_multipart", "asyncio", "uvicorn.access", "fitz",
)


def _prune_old_logs(log_dir: Path, keep: int = MAX_LOG_FILES):
    logs = sorted(log_dir.glob(f"{LOG_PREFIX}*.log"), reverse=True)
    for old in logs[keep:]:
        try:
            old.unlink()
        except OSError as e:
            # Still open by another process on Windows
            logger.debug("Could not remove old log %s: %s", old, e)


def setup_logging(level=logging.INFO, log_dir: Optional[Path] = None) -> Path:
    """
    Route the "vietcorrect" logger hierarchy to a fresh log file and stderr.

    The file always receives DEBUG records, the console only `level` and up.
    Returns the path of the new log file.
    """
    log_dir = Path(log_dir or LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    _prune_old_logs(log_dir, keep=MAX_LOG_FILES - 1)

    log_file = log_dir / f"{LOG_PREFIX}{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Log file: %s", log_file)
    return log_file


def get_latest_log(log_dir: Optional[Path] = None) -> Optional[Path]:
    logs = sorted(Path(log_dir or LOG_DIR).glob(f"{LOG_PREFIX}*.log"), reverse=True)
    return logs[0] if logs else None


def parse_log_line(line: str) -> Optional[Dict[str, str]]:
    """Fields of one log record, None for continuation lines (tracebacks)."""
    match = RECORD_LINE.match(line.rstrip("\n"))
    if not match:
        return None
    record = match.groupdict()
    record["message"] = record["message"].strip()
    return record


def analyze_log(log_path: Optional[Path] = None) -> dict:
    """
    Summarize a log file.

    Keys: errors, warnings (lists of {time, module, message}), timeline,
    modules (record count per logger), error_count, warning_count.
    """
    if log_path is None:
        log_path = get_latest_log()

    if not log_path or not Path(log_path).exists():
        return {"error": "No log file found"}

    errors: List[dict] = []
    warnings: List[dict] = []
    timeline: List[dict] = []
    modules: Counter = Counter()

    with open(log_path, "r", encoding="utf-8") as f:
        for line in f:
            record = parse_log_line(line)
            if record is None:
                continue

            entry = {"time": record["time"], "module": record["module"], "message": record["message"]}
            modules[record["module"]] += 1

            if record["level"] in ("ERROR", "CRITICAL"):
                errors.append(entry)
            elif record["level"] == "WARNING":
                warnings.append(entry)

            lowered = record["message"].lower()
            if any(kw in lowered for kw in TIMELINE_KEYWORDS):
                timeline.append({"time": record["time"], "event": record["message"][:100]})

    return {
        "log_file": str(log_path),
        "errors": errors,
        "warnings": warnings,
        "timeline": timeline,
        "modules": dict(modules),
        "error_count": len(errors),
        "warning_count": len(warnings),
    }


def print_log_analysis(log_path: Optional[Path] = None):
    analysis = analyze_log(log_path)
    if "error" in analysis:
        print(analysis["error"])
        return

    print(f"\nLog: {analysis['log_file']}")
    print(f"  {analysis['error_count']} error(s), {analysis['warning_count']} warning(s)")

    if analysis["modules"]:
        print("\nRecords per logger:")
        for module, count in sorted(analysis["modules"].items(), key=lambda kv: -kv[1]):
            print(f"  {module:<28} {count}")

    for title, entries, limit in (("Errors", analysis["errors"], None),
                                  ("Warnings", analysis["warnings"], 10)):
        if entries:
            print(f"\n{title}:")
            for entry in entries[:limit]:
                print(f"  [{entry['time']}] {entry['module']}: {entry['message'][:200]}")

    if analysis["timeline"]:
        print("\nTimeline:")
        for event in analysis["timeline"][:20]:
            print(f"  [{event['time']}] {event['event']}")
    print()
