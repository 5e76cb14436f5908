from __future__ import annotations
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .errors import CaptureFailure, DemoError, EncoderNotFound
from .pipeline import record_demo
from .scenario import ensure_valid, load_scenario, resolve_relative_urls, validate_scenario

logger = logging.getLogger("democast")

INIT_TEMPLATE = """\
name: "My product demo"
viewport:
  width: 1280
  height: 800

effects:
  zoom:
    enabled: true
    scale: 1.8
    duration: 600
  cursor:
    enabled: true
    speed: fast
    clickEffect: true
  background:
    type: gradient
    value: "linear-gradient(135deg, #667eea 0%, #764ba2 100%)"
    padding: 60
    borderRadius: 12
  deviceFrame:
    enabled: true
    type: browser

output:
  format: gif
  width: 1280
  height: 800
  fps: 15
  quality: 80
  outputDir: ./output
  filename: my-demo

steps:
  - name: "Open the page"
    actions:
      - action: navigate
        url: "https://example.com"
    holdDuration: 1000

  - name: "Follow the link"
    transition: fade
    actions:
      - action: hover
        selector: "a"
      - action: click
        selector: "a"
    holdDuration: 1500
"""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="democast", description="Record polished product demo videos from YAML scenarios."
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="count", default=0, help="more logging (-vv for debug)")
    sub = parser.add_subparsers(dest="command", required=True)

    record = sub.add_parser("record", parents=[common], help="record a scenario")
    record.add_argument("scenario", type=Path, help="path to the YAML scenario file")
    record.add_argument("-o", "--output", dest="output_dir", help="output directory")
    record.add_argument(
        "-f", "--format", choices=["gif", "mp4", "webm", "png-sequence"], help="output format"
    )
    record.add_argument("--no-effects", action="store_true", help="write raw frames without effects")
    record.add_argument(
        "--keep-partial", action="store_true", help="still write output when recording fails part-way"
    )
    record.add_argument("--headful", action="store_true", help="show the browser window")

    validate = sub.add_parser("validate", parents=[common], help="check a scenario without recording")
    validate.add_argument("scenario", type=Path)

    init = sub.add_parser("init", parents=[common], help="write a starter scenario")
    init.add_argument("path", nargs="?", type=Path, default=Path("democast.yaml"))
    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def cmd_record(args: argparse.Namespace) -> int:
    scenario = load_scenario(args.scenario)
    resolve_relative_urls(scenario, args.scenario.resolve().parent)
    if args.output_dir:
        scenario.output.output_dir = args.output_dir
    if args.format:
        scenario.output.format = args.format

    result = ensure_valid(scenario)
    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)

    try:
        demo = asyncio.run(
            record_demo(
                scenario,
                effects=not args.no_effects,
                keep_partial=args.keep_partial,
                headless=not args.headful,
            )
        )
    except CaptureFailure as err:
        frames = len(err.partial_session.frames) if err.partial_session else 0
        print(f"error: {err} ({frames} frames captured before the failure)", file=sys.stderr)
        return 1
    except EncoderNotFound as err:
        print(f"error: {err}; install ffmpeg or use --format gif", file=sys.stderr)
        return 1

    print(f"{demo.frame_count} frames written to {demo.output_path}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    scenario = load_scenario(args.scenario)
    result = validate_scenario(scenario)
    for error in result.errors:
        print(f"error: {error}")
    for warning in result.warnings:
        print(f"warning: {warning}")
    if result.valid:
        print(f"{scenario.name}: {len(scenario.steps)} steps, OK")
        return 0
    return 1


def cmd_init(args: argparse.Namespace) -> int:
    if args.path.exists():
        print(f"error: {args.path} already exists", file=sys.stderr)
        return 1
    args.path.write_text(INIT_TEMPLATE, encoding="utf-8")
    print(f"Wrote {args.path}")
    return 0


COMMANDS = {"record": cmd_record, "validate": cmd_validate, "init": cmd_init}


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    try:
        return COMMANDS[args.command](args)
    except DemoError as err:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {err}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
