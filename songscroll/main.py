"""
Command line entrypoint.

Runs the scroll engine against a simulated page on a virtual clock so timing
profiles and speed settings can be checked without a browser. Scripted
commands (``--command 4000:pause``) are applied at the given virtual time.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .scheduling import VirtualScheduler
from .scroll import ScrollEngine
from .settings import DEFAULT_PROFILE, InvalidProfile, UnknownProfile, get_profile
from .utils.logging import configure_logging
from .viewport import ScrollTarget, SimulatedViewport

LOG = logging.getLogger(__name__)

ScriptedCommand = Tuple[int, str, Dict[str, Any]]
SCRIPTED_OPS = {"play", "resume", "pause", "stop"}


@dataclass
class SimulationResult:
    elapsed_ms: float
    final_offset: float
    max_offset: float
    completed: bool


def parse_command(raw: str) -> ScriptedCommand:
    """
    Parse ``MS:OP`` where OP is ``play``, ``pause``, ``stop`` or a comma
    separated list of ``key=value`` updates.
    """

    at, sep, op = str(raw).partition(":")
    if not sep or not op:
        raise argparse.ArgumentTypeError(f"expected MS:OP, got '{raw}'")
    try:
        at_ms = int(at)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid command time '{at}'") from None
    if at_ms < 0:
        raise argparse.ArgumentTypeError("command time must be non-negative")

    if "=" not in op:
        command = op.strip().lower()
        if command not in SCRIPTED_OPS:
            raise argparse.ArgumentTypeError(f"unknown command '{op}'")
        return at_ms, command, {}

    params: Dict[str, Any] = {}
    for item in op.split(","):
        key, eq, value = item.partition("=")
        if not eq or not key.strip():
            raise argparse.ArgumentTypeError(f"invalid update '{item}'")
        params[key.strip()] = value.strip()
    return at_ms, "update", params


def simulate(
    engine: ScrollEngine,
    scheduler: VirtualScheduler,
    viewport: SimulatedViewport,
    *,
    duration_ms: int,
    report_every_ms: int = 1000,
    commands: Optional[List[ScriptedCommand]] = None,
    target: Optional[ScrollTarget] = None,
) -> SimulationResult:
    pending = sorted(commands or [], key=lambda item: item[0])
    report_every_ms = max(1, int(report_every_ms))
    next_report = report_every_ms
    start_offset = viewport.scroll_offset()

    engine.play(target)
    LOG.info("t=%6dms offset=%8.1f %s", 0, viewport.scroll_offset(), engine.get_config().describe())

    while scheduler.now_ms < duration_ms:
        checkpoint = min(next_report, duration_ms)
        if pending:
            checkpoint = min(checkpoint, pending[0][0])
        scheduler.advance(checkpoint - scheduler.now_ms)

        while pending and pending[0][0] <= scheduler.now_ms:
            _, op, params = pending.pop(0)
            snapshot = engine.apply(op, **params)
            LOG.info("t=%6dms %s -> %s", scheduler.now_ms, op, snapshot.describe())

        if scheduler.now_ms >= next_report:
            LOG.info(
                "t=%6dms offset=%8.1f %s",
                scheduler.now_ms,
                viewport.scroll_offset(),
                engine.get_config().describe(),
            )
            next_report += report_every_ms

        if not engine.is_active() and not pending:
            break

    completed = not engine.is_active() and scheduler.now_ms < duration_ms
    result = SimulationResult(
        elapsed_ms=scheduler.now_ms,
        final_offset=viewport.scroll_offset(),
        max_offset=max([start_offset] + [event.offset for event in viewport.history]),
        completed=completed,
    )
    engine.destroy()
    return result


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate lyrics auto-scroll on a virtual page")
    parser.add_argument("--profile", default=DEFAULT_PROFILE, help="timing profile to load")
    parser.add_argument("--speed", type=int, default=5, help="scroll speed (1-10)")
    parser.add_argument("--delay", type=int, default=0, help="start delay in seconds")
    parser.add_argument("--document-height", type=float, default=4000.0, help="page height in px")
    parser.add_argument("--viewport-height", type=float, default=800.0, help="viewport height in px")
    parser.add_argument("--target", type=float, default=None, help="document offset of the lyrics block")
    parser.add_argument("--duration", type=int, default=60_000, help="simulated duration in ms")
    parser.add_argument("--report-every", type=int, default=1000, help="report interval in ms")
    parser.add_argument(
        "--command",
        action="append",
        type=parse_command,
        default=[],
        metavar="MS:OP",
        help="scripted command, e.g. 4000:pause, 6000:play or 8000:speed=9",
    )
    parser.add_argument("--log-level", default="INFO", help="logging level")
    return parser.parse_args(argv)


def run(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        profile = get_profile(args.profile)
    except (UnknownProfile, InvalidProfile) as exc:
        LOG.error("%s", exc)
        return 1

    scheduler = VirtualScheduler()
    viewport = SimulatedViewport(page_height=args.document_height, window_height=args.viewport_height)
    engine = ScrollEngine(
        viewport,
        scheduler,
        start_delay_seconds=args.delay,
        speed=args.speed,
        profile=profile,
    )
    target = ScrollTarget("lyrics", args.target) if args.target is not None else None

    result = simulate(
        engine,
        scheduler,
        viewport,
        duration_ms=args.duration,
        report_every_ms=args.report_every,
        commands=args.command,
        target=target,
    )
    LOG.info(
        "Finished after %dms (max offset %.1f, %s)",
        result.elapsed_ms,
        result.max_offset,
        "reached end" if result.completed else "time limit",
    )
    return 0


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
