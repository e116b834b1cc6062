#!/usr/bin/env python3
"""
VietCorrect CLI - Command Line Interface

Vietnamese text normalization for plain text, Word and PDF files.

Usage:
    python cli.py fix notes.txt -o notes_fixed.txt
    python cli.py extract report.docx
    python cli.py fix-docx report.docx
    python cli.py to-docx scan.pdf --ai
    python cli.py config set-key <API_KEY>

© 2025 Sven Kalinowski with small help of Lino Casu
Licensed under the Anti-Capitalist Software License v1.4
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger("vietcorrect.cli")


def print_banner():
    """Print CLI banner."""
    try:
        print("""
+-----------------------------------------------------------+
|                  VietCorrect - CLI                         |
|     Vietnamese capitalization & bullet normalization       |
+-----------------------------------------------------------+
""")
    except UnicodeEncodeError:
        print("\n=== VietCorrect - CLI ===\n")


def read_source_text(source: str) -> str:
    """Text of a .docx, .pdf or plain text file; "-" reads stdin."""
    if source == "-":
        return sys.stdin.read()

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".docx":
        from docx_corrector import extract_docx_text
        return extract_docx_text(path)
    if suffix == ".pdf":
        from pdf_extractor import extract_pdf_text
        return extract_pdf_text(path)
    return path.read_text(encoding="utf-8")


def write_output(text: str, output: Optional[str]):
    if output:
        Path(output).write_text(text, encoding="utf-8")
        print(f"[OK] Written to {output}", file=sys.stderr)
    else:
        sys.stdout.write(text)
        if text and not text.endswith("\n"):
            sys.stdout.write("\n")


# =============================================================================
# TEXT COMMANDS
# =============================================================================

def cmd_fix(args):
    """Normalize a text file (or stdin) with the local rules."""
    from text_processor import normalize_text

    text = read_source_text(args.input)
    write_output(normalize_text(text), args.output)
    return 0


def cmd_extract(args):
    """Extract plain text from a .docx or .pdf."""
    text = read_source_text(args.input)
    write_output(text, args.output)
    return 0


def cmd_stats(args):
    """Character and word counts."""
    from text_processor import get_stats

    stats = get_stats(read_source_text(args.input))
    print(f"Characters: {stats['chars']}")
    print(f"Words: {stats['words']}")
    return 0


def cmd_ai_fix(args):
    """Correct text with the AI service."""
    from ai_service import fix_text_with_ai
    from settings import load_settings

    settings = load_settings()
    if not settings.api_key:
        print("[ERROR] API key not set. Use 'config set-key' or GEMINI_API_KEY.", file=sys.stderr)
        return 1

    text = read_source_text(args.input)
    result = fix_text_with_ai(text, settings.api_key, args.model or settings.model)
    print(f"Model used: {result.model_used}", file=sys.stderr)
    write_output(result.text, args.output)
    return 0


# =============================================================================
# DOCX COMMANDS
# =============================================================================

def cmd_fix_docx(args):
    """Correct a Word document in place, keeping its formatting."""
    from docx_corrector import correct_docx_file

    result = correct_docx_file(args.input, args.output)
    print(f"[OK] Paragraphs corrected: {result.paragraphs_corrected}")
    print(f"Paragraphs skipped: {result.paragraphs_skipped}")
    if result.numbering_removed:
        print(f"Numbering flattened into text: {result.numbering_removed}")
    print(f"Output: {result.output_path}")
    return 0


def cmd_to_docx(args):
    """Build a new Word document from text or PDF."""
    from docx_builder import fixed_docx_name, save_docx_from_text
    from text_processor import normalize_text

    if args.input == "-" and not args.output:
        raise ValueError("Reading from stdin needs an output file (-o)")

    text = read_source_text(args.input)

    if args.ai:
        from ai_service import fix_text_with_ai
        from settings import load_settings

        settings = load_settings()
        if not settings.api_key:
            print("[ERROR] API key not set. Use 'config set-key' or GEMINI_API_KEY.", file=sys.stderr)
            return 1
        result = fix_text_with_ai(text, settings.api_key, args.model or settings.model)
        print(f"Model used: {result.model_used}", file=sys.stderr)
        text = result.text
    elif not args.raw:
        text = normalize_text(text)

    input_path = Path(args.input)
    output = Path(args.output) if args.output else input_path.with_name(fixed_docx_name(input_path.name))
    save_docx_from_text(text, output)
    print(f"[OK] Output: {output}")
    return 0


# =============================================================================
# SETTINGS COMMANDS
# =============================================================================

def cmd_models(args):
    """List available AI models."""
    from ai_service import MODELS
    from settings import load_settings

    current = load_settings().model
    print(f"  {'Model':<25} {'Name':<20} {'Notes'}")
    print(f"  {'-'*25} {'-'*20} {'-'*30}")
    for model in MODELS:
        mark = "*" if model.id == current else " "
        print(f"{mark} {model.id:<25} {model.name:<20} {model.desc}")
    return 0


def cmd_config(args):
    """Show or change stored settings."""
    from settings import get_settings_path, load_settings, set_api_key, set_model

    if args.action == "show":
        settings = load_settings()
        key = settings.api_key
        masked = f"{key[:4]}...{key[-4:]}" if key and len(key) > 8 else ("set" if key else "not set")
        print(f"Settings file: {get_settings_path()}")
        print(f"API key: {masked}")
        print(f"Model: {settings.model}")
        return 0

    if not args.value:
        print(f"[ERROR] '{args.action}' needs a value", file=sys.stderr)
        return 1

    if args.action == "set-key":
        set_api_key(args.value)
        print("[OK] API key saved")
    else:
        set_model(args.value)
        print(f"[OK] Model set to {args.value}")
    return 0


def cmd_logs(args):
    """Summarize the latest log file."""
    from logging_config import print_log_analysis

    print_log_analysis(Path(args.path) if args.path else None)
    return 0


# =============================================================================
# MAIN
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="VietCorrect - CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli.py fix notes.txt
  cat notes.txt | python cli.py fix -
  python cli.py fix-docx report.docx -o report_fixed.docx
  python cli.py to-docx scan.pdf --ai
  python cli.py config show
"""
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Command")

    p_fix = subparsers.add_parser("fix", help="Normalize text with the local rules")
    p_fix.add_argument("input", help="Text, .docx or .pdf file ('-' for stdin)")
    p_fix.add_argument("-o", "--output", help="Output text file")
    p_fix.set_defaults(func=cmd_fix)

    p_extract = subparsers.add_parser("extract", help="Extract text from .docx or .pdf")
    p_extract.add_argument("input", help="Input file")
    p_extract.add_argument("-o", "--output", help="Output text file")
    p_extract.set_defaults(func=cmd_extract)

    p_stats = subparsers.add_parser("stats", help="Character and word counts")
    p_stats.add_argument("input", help="Input file ('-' for stdin)")
    p_stats.set_defaults(func=cmd_stats)

    p_ai = subparsers.add_parser("ai-fix", help="Correct text with the AI service")
    p_ai.add_argument("input", help="Input file ('-' for stdin)")
    p_ai.add_argument("-o", "--output", help="Output text file")
    p_ai.add_argument("-m", "--model", help="Preferred model")
    p_ai.set_defaults(func=cmd_ai_fix)

    p_fix_docx = subparsers.add_parser("fix-docx", help="Correct a .docx keeping its formatting")
    p_fix_docx.add_argument("input", help="Input .docx")
    p_fix_docx.add_argument("-o", "--output", help="Output .docx (default: <name>_fixed.docx)")
    p_fix_docx.set_defaults(func=cmd_fix_docx)

    p_to_docx = subparsers.add_parser("to-docx", help="Create a new .docx from text or PDF")
    p_to_docx.add_argument("input", help="Text or .pdf file")
    p_to_docx.add_argument("-o", "--output", help="Output .docx")
    p_to_docx.add_argument("--ai", action="store_true", help="Correct with the AI service first")
    p_to_docx.add_argument("--raw", action="store_true", help="Skip local normalization")
    p_to_docx.add_argument("-m", "--model", help="Preferred model (with --ai)")
    p_to_docx.set_defaults(func=cmd_to_docx)

    p_models = subparsers.add_parser("models", help="List AI models")
    p_models.set_defaults(func=cmd_models)

    p_config = subparsers.add_parser("config", help="Settings management")
    p_config.add_argument("action", choices=["show", "set-key", "set-model"])
    p_config.add_argument("value", nargs="?", help="API key or model id")
    p_config.set_defaults(func=cmd_config)

    p_logs = subparsers.add_parser("logs", help="Analyze a log file")
    p_logs.add_argument("--path", help="Log file (default: latest)")
    p_logs.set_defaults(func=cmd_logs)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        print_banner()
        parser.print_help()
        return 0

    from logging_config import setup_logging
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    from ai_service import AIServiceError
    from docx_corrector import DocxProcessingError
    from pdf_extractor import PdfExtractionError

    try:
        return args.func(args)
    except (FileNotFoundError, ValueError, DocxProcessingError,
            PdfExtractionError, AIServiceError) as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
