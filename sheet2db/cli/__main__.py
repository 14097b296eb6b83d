from __future__ import annotations

import argparse
import sys
from pathlib import Path

from ..config.loader import ConfigError, ConvertConfig, default_config, load_config
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, setup_logging
from ..models.source import SourceDescriptor
from ..services.batch import ConversionJob, JobPreparer, convert_all, plan_job
from ..services.converter import detect_headers, list_sheets
from ..services.summary import render_summary_line

"""CLI entrypoint.

- ``sheet2db a.xlsx b.csv ...``: batch mode, no prompts; multi-sheet workbooks use
  their first sheet unless ``--sheet`` is given
- ``sheet2db --interactive file``: choose the sheet and confirm the detected
  header row before converting
- ``sheet2db`` without files: asks for one path on stdin, then interactive mode
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="sheet2db", description="Convert Excel (.xlsx/.xls) and CSV files to SQLite"
    )
    p.add_argument("files", nargs="*", help="source files to convert")
    p.add_argument("--sheet", help="sheet to convert (default: first sheet)")
    p.add_argument("--headers", help="comma separated column names; the first row stays data")
    p.add_argument("-o", "--output", help="output database path (single input file only)")
    p.add_argument("--config", help="YAML config file")
    p.add_argument("-i", "--interactive", action="store_true",
                   help="select sheet and confirm headers before converting")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _split_headers(raw: str) -> list[str]:
    return raw.split(",")


def _strip_quotes(raw: str) -> str:
    # エクスプローラの「パスのコピー」は引用符付き
    value = raw.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _select_sheet(sheet_names: list[str]) -> int | None:
    print(f"Multiple sheets found, enter the index to export (0 - {len(sheet_names) - 1}):")
    for i, name in enumerate(sheet_names):
        print(f"  [{i}] {name}")
    while True:
        try:
            raw = input("index: ")
        except EOFError:
            return None
        try:
            idx = int(raw.strip())
        except ValueError:
            idx = -1
        if 0 <= idx < len(sheet_names):
            return idx
        print("invalid input, try again")


def _confirm_headers(headers: list[str]) -> bool:
    print("Detected headers:")
    for i, header in enumerate(headers, start=1):
        print(f"  {i}: {header}")
    try:
        answer = input("Use these headers? (y/n): ")
    except EOFError:
        return False
    return answer.strip().lower() == "y"


def _interactive_preparer(
    cfg: ConvertConfig,
    sheet: str | None,
    headers: list[str] | None,
    output: str | None,
) -> JobPreparer:
    def prepare(path: Path) -> ConversionJob | None:
        chosen = sheet
        sheets: list[str] | None = None
        if SourceDescriptor.for_path(path).format.is_spreadsheet:
            # カタログは一度だけ読む
            sheets = list_sheets(path)
            if chosen is None and len(sheets) > 1:
                idx = _select_sheet(sheets)
                if idx is None:
                    return None
                chosen = sheets[idx]
        job = plan_job(path, sheet=chosen, headers=headers, output=output, config=cfg, sheets=sheets)
        if job.headers is None:
            # 確認のみ。変換時は先頭行を検出ヘッダとして再度スキップする
            detected = detect_headers(job.source, job.sheet, config=cfg)
            if not _confirm_headers(detected):
                return None
            print("Converting, please wait...")
        return job

    return prepare


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    logger.debug("debug mode enabled")

    if args.config:
        try:
            cfg = load_config(Path(args.config))
        except ConfigError as e:
            logger.error(f"config: {e}")
            return EXIT_FATAL
    else:
        cfg = default_config()

    files: list[str] = list(args.files)
    interactive = args.interactive
    if not files:
        print("Excel/CSV to SQLite converter")
        try:
            raw = input("Enter the path of the file to convert: ")
        except EOFError:
            raw = ""
        path = _strip_quotes(raw)
        if not path:
            logger.error("no input files")
            return EXIT_FATAL
        files = [path]
        interactive = True

    if args.output and len(files) > 1:
        logger.error("--output requires exactly one input file")
        return EXIT_FATAL

    headers = _split_headers(args.headers) if args.headers is not None else None
    if interactive:
        prepare = _interactive_preparer(cfg, args.sheet, headers, args.output)
    else:
        def prepare(path: Path) -> ConversionJob | None:
            return plan_job(path, sheet=args.sheet, headers=headers, output=args.output, config=cfg)

    error_log = ErrorLogBuffer(cfg.error_log_dir)
    result = convert_all(files, prepare=prepare, config=cfg, error_log=error_log)

    log_path = error_log.flush()
    if log_path is not None:
        logger.info(f"error log written: {log_path}")

    summary_line = render_summary_line(result)
    # log_summary adds the "SUMMARY " prefix itself
    log_summary(summary_line[len("SUMMARY "):])

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
