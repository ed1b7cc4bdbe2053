"""logspool — log entries through a file spool in front of a file sink."""

import json
import logging
import sys
from argparse import ArgumentParser

import yaml

from logspool.config import load_config
from logspool.models import Severity, create_log_entry
from logspool.sink import FileSink
from logspool.spool_queue import SpoolQueue


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="logspool",
        description="Deliver log entries to a file sink, spooling them while it is unavailable.",
    )
    parser.add_argument(
        "--config",
        help="YAML config file (default: $LOGSPOOL_CONFIG)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    log_cmd = sub.add_parser("log", help="Log one entry")
    log_cmd.add_argument("--category", required=True, help="Entry category, e.g. auth")
    log_cmd.add_argument("--message", required=True, help="Entry message")
    log_cmd.add_argument(
        "--severity",
        default="notice",
        help="Severity name or 0-7 level (default: notice)",
    )
    log_cmd.add_argument(
        "--attr",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Attribute for the entry (repeatable)",
    )

    sub.add_parser("flush", help="Replay spooled entries into the sink")
    sub.add_parser("empty", help="Discard spooled entries")

    status_cmd = sub.add_parser("status", help="Show the spool backlog")
    status_cmd.add_argument(
        "--output",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    return parser


def parse_attrs(pairs: list[str]) -> dict:
    """Turn ``KEY=VALUE`` strings into a dict, keeping the given order."""
    attrs = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Attribute must be KEY=VALUE: {pair!r}")
        key, value = pair.split("=", 1)
        attrs[key] = value
    return attrs


def run(args) -> int:
    config = load_config(args.config)
    logging.getLogger().setLevel(config.log_level)
    sink = FileSink(config.sink_file)

    with SpoolQueue(sink.ready, sink.deliver, config=config) as spool:
        if args.command == "log":
            entry = create_log_entry(
                category=args.category,
                message=args.message,
                attributes=parse_attrs(args.attr),
                severity=Severity.parse(args.severity),
            )
            spool.log(entry)
        elif args.command == "flush":
            if not spool.flush():
                print(f"Sink not ready: {sink.path}", file=sys.stderr)
                return 1
        elif args.command == "empty":
            spool.empty_spool()
        elif args.command == "status":
            status = {
                "spool": spool.path,
                "backlog": spool.backlog_size,
                "sink": sink.path,
                "sink_ready": sink.ready(),
            }
            if args.output == "json":
                print(json.dumps(status))
            else:
                for key, value in status.items():
                    print(f"{key}: {value}")
    return 0


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    parser = build_parser()
    args = parser.parse_args()
    try:
        code = run(args)
    except (ValueError, OSError, yaml.YAMLError) as e:
        parser.error(str(e))
    sys.exit(code)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        sys.exit(0)
