"""Command line entry point: write a single point."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from influxline.client import InfluxClient
from influxline.config import default_config_path, load_app_config
from influxline.errors import ConfigError, EncodingError
from influxline.logging_setup import setup_logging
from influxline.point import FieldValue, Point
from influxline.precision import Precision

logger = logging.getLogger("influxline.cli")


def _split_pair(raw: str, option: str) -> Tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise ConfigError(f"{option} expects key=value, got {raw!r}")
    return key, value


def parse_field_value(raw: str) -> FieldValue:
    """Interpret a command line field value the way line protocol writes it."""

    if len(raw) >= 2 and raw.startswith('"') and raw.endswith('"'):
        return FieldValue.string(raw[1:-1])
    lowered = raw.lower()
    if lowered in {"true", "false"}:
        return FieldValue.boolean(lowered == "true")
    if raw.endswith("i"):
        try:
            return FieldValue.integer(int(raw[:-1]))
        except ValueError:
            pass
    try:
        return FieldValue.floating(float(raw))
    except (ValueError, EncodingError):
        return FieldValue.string(raw)


def build_point(measurement: str, tags: List[str], fields: List[str], time: Optional[str]) -> Point:
    point = Point(measurement)
    for raw in tags:
        point.add_tag(*_split_pair(raw, "--tag"))
    for raw in fields:
        name, value = _split_pair(raw, "--field")
        point.set_field(name, parse_field_value(value))
    if time:
        try:
            point.set_timestamp(datetime.fromisoformat(time))
        except ValueError:
            raise ConfigError(f"--time must be ISO-8601, got {time!r}") from None
    # surfaces a missing measurement or field as a usage error
    point.encode()
    return point


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="influxline", description="Write one line protocol point.")
    parser.add_argument("--config", dest="config_path", help="Path to influxline config YAML.")
    parser.add_argument("--measurement", "-m", required=True)
    parser.add_argument("--tag", "-t", action="append", default=[], help="Tag as key=value (repeatable).")
    parser.add_argument(
        "--field",
        "-f",
        action="append",
        default=[],
        help='Field as key=value (repeatable); 5i integer, true/false, "text" string, otherwise float.',
    )
    parser.add_argument("--time", help="Explicit ISO-8601 timestamp; defaults to now.")
    parser.add_argument("--precision", help="Override precision (s, ms, u).")
    parser.add_argument("--log-level", default=None)
    return parser


def main(argv: Optional[List[str]] = None, client: Optional[InfluxClient] = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        point = build_point(args.measurement, args.tag, args.field, args.time)
        if client is None:
            config_path = Path(args.config_path) if args.config_path else default_config_path()
            app_cfg = load_app_config(config_path)
            setup_logging(app_cfg.logging.path, args.log_level or app_cfg.logging.level)
            client = InfluxClient.from_config(app_cfg.client)
        elif args.log_level:
            setup_logging(None, args.log_level)
        if args.precision:
            client.set_precision(Precision.parse(args.precision))
    except (ConfigError, EncodingError, FileNotFoundError) as exc:
        print(f"[influxline] {exc}", file=sys.stderr)
        return 2

    with client:
        result = client.write_single(point).result()
    if not result.ok:
        logger.error("Write failed: %s", result.error)
        return 1
    logger.info("Wrote point to %s (HTTP %s)", client.build_endpoint(), result.status_code)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
