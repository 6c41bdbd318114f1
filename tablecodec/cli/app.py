from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..codec.records import decode
from ..codec.upsert import find_and_update, upsert_records
from ..codec.writer import write_records
from ..config.loader import AppConfig, ConfigError, LineLayout, load_config, resolve_config_path
from ..errors import TranscodeError
from ..grid.accessor import GridAccessor
from ..logging.init import get_logger, log_summary, set_level, setup_logging
from ..logging.issue_log import IssueLogBuffer
from ..models.options import ReadOptions, WriteOptions
from ..services.orchestrator import JobError, dump_records, load_records, open_workbook, run_jobs
from ..services.summary import render_summary_line
from ..store.workbook import WorkbookTableStore

"""Command line entry point.

Sub-commands:
- read         decode a table and print (or save) its records
- write        write records from a JSON file with a write mode
- upsert       update matching lines, append the rest
- find-update  update selected fields on matching lines
- run          execute the job list of the config file

The workbook comes from --workbook or from the config file
(config/tablecodec.yml, or $TABLECODEC_CONFIG, which may be set in .env).
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _load_env_file(path: Path, override: bool = False) -> None:
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _add_layout_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("table", help="Table (worksheet) name")
    p.add_argument("--header-line", type=int, help="Line holding the field names")
    p.add_argument("--start-line", type=int, help="First data line")
    p.add_argument("--pivot", action="store_true", default=None, help="Records are columns, fields are rows")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="tablecodec", description="Spreadsheet table <-> record transcoder")
    p.add_argument("--config", help="Config file (default: $TABLECODEC_CONFIG or config/tablecodec.yml)")
    p.add_argument("--workbook", help="Workbook path; overrides the config file")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    r = sub.add_parser("read", help="Decode a table into records")
    _add_layout_args(r)
    r.add_argument("--last-column", help="Column cap as a number or letter")
    r.add_argument("--verbose-records", action="store_true", help="Log every decoded record")
    r.add_argument("--output", help="Write records to this file instead of stdout")
    r.add_argument("--format", choices=["json", "csv"], default="json", help="Output format for stdout")

    w = sub.add_parser("write", help="Write records into a table")
    _add_layout_args(w)
    w.add_argument("--input", required=True, help="JSON file with a list of records")
    w.add_argument("--mode", help="overwrite, append or overlay")
    w.add_argument("--no-preserve-formulas", action="store_true", help="Do not replay formulas")

    u = sub.add_parser("upsert", help="Update matching lines and append the rest")
    _add_layout_args(u)
    u.add_argument("--input", required=True, help="JSON file with a list of records")
    u.add_argument("--match", required=True, help="Field used to match records to lines")

    f = sub.add_parser("find-update", help="Update selected fields on matching lines")
    f.add_argument("table", help="Table (worksheet) name")
    f.add_argument("--header-line", type=int, help="Line holding the field names")
    f.add_argument("--start-line", type=int, help="First data line")
    f.add_argument("--input", required=True, help="JSON file with a list of records")
    f.add_argument("--match", required=True, help="Field used to match records to lines")
    f.add_argument("--fields", nargs="+", required=True, help="Fields to update")

    sub.add_parser("run", help="Run the jobs listed in the config file")
    return p.parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> AppConfig:
    """Load the config file; with --workbook and no file, fall back to library defaults."""
    path = resolve_config_path(args.config)
    if args.workbook and args.config is None and not path.exists():
        return AppConfig(
            workbook=args.workbook,
            read=ReadOptions(),
            read_layout=LineLayout(),
            write=WriteOptions(),
            write_layout=LineLayout(),
        )
    cfg = load_config(path)
    if args.workbook:
        cfg = AppConfig(
            workbook=args.workbook,
            read=cfg.read,
            read_layout=cfg.read_layout,
            write=cfg.write,
            write_layout=cfg.write_layout,
            jobs=cfg.jobs,
            logs_dir=cfg.logs_dir,
            log_level=cfg.log_level,
        )
    return cfg


def _open_store(cfg: AppConfig) -> WorkbookTableStore:
    return open_workbook(cfg.workbook)


def _cmd_read(args: argparse.Namespace, cfg: AppConfig) -> int:
    last_column = cfg.read.last_column
    if args.last_column is not None:
        last_column = int(args.last_column) if args.last_column.isdigit() else args.last_column
    store = _open_store(cfg)
    opts = ReadOptions(
        last_column=last_column,
        mute=not args.verbose_records and cfg.read.mute,
        use_display_dates=cfg.read.use_display_dates,
        pivot=cfg.read.pivot if args.pivot is None else args.pivot,
        strict_headers=cfg.read.strict_headers,
    )
    result = decode(
        GridAccessor(store),
        args.table,
        header_line=args.header_line or cfg.read_layout.header_line,
        start_line=args.start_line or cfg.read_layout.start_line,
        options=opts,
    )
    if args.output:
        out = dump_records(result, args.output)
        get_logger().info("wrote %d records to %s", len(result), out)
    elif args.format == "csv":
        sys.stdout.write(result.to_frame().to_csv())
    else:
        print(json.dumps(result.records, ensure_ascii=False, indent=2, default=str))
    return EXIT_SUCCESS_ALL


def _cmd_write(args: argparse.Namespace, cfg: AppConfig) -> int:
    records = load_records(args.input)
    store = _open_store(cfg)
    opts = WriteOptions(
        mode=args.mode or cfg.write.mode,
        pivot=cfg.write.pivot if args.pivot is None else args.pivot,
        preserve_formulas=cfg.write.preserve_formulas and not args.no_preserve_formulas,
        strict_headers=cfg.write.strict_headers,
    )
    write_records(
        GridAccessor(store),
        args.table,
        records,
        header_line=args.header_line or cfg.write_layout.header_line,
        start_line=args.start_line or cfg.write_layout.start_line,
        options=opts,
    )
    store.save()
    return EXIT_SUCCESS_ALL


def _cmd_upsert(args: argparse.Namespace, cfg: AppConfig) -> int:
    records = load_records(args.input)
    store = _open_store(cfg)
    result = upsert_records(
        GridAccessor(store),
        args.table,
        records,
        args.match,
        header_line=args.header_line or cfg.write_layout.header_line,
        start_line=args.start_line or cfg.write_layout.start_line,
        pivot=cfg.write.pivot if args.pivot is None else args.pivot,
    )
    store.save()
    get_logger().info("upsert: updated=%d inserted=%d", result.updated, result.inserted)
    return EXIT_SUCCESS_ALL


def _cmd_find_update(args: argparse.Namespace, cfg: AppConfig) -> int:
    records = load_records(args.input)
    store = _open_store(cfg)
    issue_log = IssueLogBuffer(Path(cfg.logs_dir))
    result = find_and_update(
        GridAccessor(store),
        args.table,
        records,
        args.match,
        args.fields,
        header_line=args.header_line or cfg.write_layout.header_line,
        start_line=args.start_line or cfg.write_layout.start_line,
        issue_log=issue_log,
    )
    store.save()
    issue_log.flush()
    get_logger().info(
        "find-update: matched=%d skipped_fields=%d", len(result.matched_lines), len(result.skipped_fields)
    )
    return EXIT_SUCCESS_ALL


def _cmd_run(args: argparse.Namespace, cfg: AppConfig) -> int:
    result = run_jobs(cfg)
    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    if result.failed_jobs > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


_COMMANDS = {
    "read": _cmd_read,
    "write": _cmd_write,
    "upsert": _cmd_upsert,
    "find-update": _cmd_find_update,
    "run": _cmd_run,
}


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # Only None reads sys.argv; an empty list is a real (empty) argument list.
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    try:
        cfg = _resolve_config(args)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    set_level("DEBUG" if args.debug else cfg.log_level)
    if args.debug:
        logger.debug("debug mode enabled")

    try:
        return _COMMANDS[args.command](args, cfg)
    except (TranscodeError, JobError) as e:
        logger.error(f"{args.command}: {e}")
        return EXIT_FATAL
