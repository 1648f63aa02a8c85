"""Command line entry point for bumpkit."""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from dataclasses import replace
from pathlib import Path
from typing import Callable

from app.preferences import Preferences, load_preferences, save_preferences
from app.version import get_app_version
from domain.upgrades.errors import InvalidScheduleError, PackageStoreError, UnsupportedModeError
from services.upgrade.batch import BatchOutcome
from services.upgrade.builder import build_upgrade_service, schedule_daily_upgrade
from services.upgrade.scheduler import ScheduledJob
from services.upgrade.service import UP_TO_DATE_MESSAGE, UpgradeService
from shared.logging_config import LogVerbosity, ensure_app_logging
from ui.upgrade_list.rendering import format_candidate
from ui.upgrade_list.terminal import TerminalPrompter

_LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PARTIAL_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bumpkit",
        description="Review and upgrade installed packages.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_app_version()}")
    parser.add_argument("--store-root", type=Path, help="Package store directory.")
    parser.add_argument("--mirror", type=Path, help="Upstream folder providing catalog.json.")
    parser.add_argument(
        "--interval-days",
        type=_positive_int,
        help="Days between metadata refreshes.",
    )
    parser.add_argument(
        "--log-verbosity",
        choices=[verbosity.value for verbosity in LogVerbosity],
        help="Minimum severity written to the log file.",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    check = commands.add_parser("check-upgrades", help="List packages with upgrades available.")
    _add_vc_flag(check)

    upgrade_all = commands.add_parser("upgrade-all", help="Upgrade every package without prompting.")
    _add_vc_flag(upgrade_all)
    upgrade_all.add_argument(
        "--refresh",
        action="store_true",
        help="Refresh stale metadata before upgrading.",
    )

    interactive = commands.add_parser(
        "upgrade-interactive", help="Choose which packages to upgrade."
    )
    _add_vc_flag(interactive)

    named = commands.add_parser("upgrade", help="Upgrade the named packages.")
    named.add_argument("names", nargs="+", help="Package names.")
    _add_vc_flag(named)

    refresh = commands.add_parser("refresh", help="Refresh package metadata when stale.")
    refresh.add_argument("--force", action="store_true", help="Refresh even when fresh.")

    schedule = commands.add_parser("schedule", help="Run the upgrade flow daily at a fixed time.")
    schedule.add_argument(
        "time",
        nargs="?",
        help="Time of day, e.g. 03:30 or 3:30am. Defaults to the saved schedule time.",
    )
    schedule.add_argument(
        "--auto",
        action="store_true",
        default=None,
        help="Upgrade everything without opening the selection list.",
    )
    schedule.add_argument(
        "--save",
        action="store_true",
        help="Remember the time and --auto choice as the defaults for later runs.",
    )
    _add_vc_flag(schedule)
    return parser


def _add_vc_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--include-vc",
        action="store_true",
        default=None,
        help="Also synchronise VC-tracked packages.",
    )


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an integer: {value}") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return number


def _wait_forever() -> None:
    threading.Event().wait()


def main(
    argv: list[str] | None = None,
    *,
    prompter: TerminalPrompter | None = None,
    service_factory: Callable[..., UpgradeService] = build_upgrade_service,
    wait: Callable[[], None] | None = None,
) -> int:
    args = build_parser().parse_args(argv)
    preferences = load_preferences()
    ensure_app_logging(args.log_verbosity or preferences.log_verbosity)
    prompter = prompter or TerminalPrompter()

    service = service_factory(
        store_root=args.store_root,
        mirror=args.mirror,
        interval_days=args.interval_days,
        preferences=preferences,
    )
    include_vc = _include_vc(args, preferences)
    _LOGGER.debug("Running %s (include_vc=%s)", args.command, include_vc)

    try:
        if args.command == "check-upgrades":
            return _check_upgrades(service, prompter, include_vc)
        if args.command == "upgrade-all":
            if args.refresh:
                service.check_mode(include_vc)
                service.refresh_if_stale()
            return _finish(prompter, service.upgrade_all(include_vc))
        if args.command == "upgrade-interactive":
            outcome = service.upgrade_interactive(prompter, include_vc)
            return _finish(prompter, outcome, quiet_when_empty=True)
        if args.command == "upgrade":
            outcome, missing = service.upgrade_named(args.names, include_vc)
            for name in missing:
                prompter.notify(f"{name}: no upgrade available")
            return _finish(prompter, outcome, quiet_when_empty=bool(missing))
        if args.command == "refresh":
            return _refresh(service, prompter, force=args.force)
        if args.command == "schedule":
            time_of_day = args.time or preferences.schedule_time
            if not time_of_day:
                raise InvalidScheduleError("No schedule time given and none saved in preferences")
            auto = args.auto if args.auto is not None else bool(preferences.auto_upgrade)
            job = schedule_daily_upgrade(service, prompter, time_of_day, include_vc=include_vc, auto=auto)
            if args.save:
                save_preferences(replace(preferences, schedule_time=str(job.spec), auto_upgrade=auto))
                _LOGGER.info("Saved daily schedule %s (auto=%s) to preferences", job.spec, auto)
            return _wait_for_schedule(job, prompter, wait or _wait_forever)
    except (UnsupportedModeError, InvalidScheduleError) as exc:
        _LOGGER.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    raise AssertionError(f"Unhandled command: {args.command}")


def _include_vc(args: argparse.Namespace, preferences: Preferences) -> bool:
    flag = getattr(args, "include_vc", None)
    if flag is not None:
        return flag
    return bool(preferences.include_vc)


def _check_upgrades(service: UpgradeService, prompter: TerminalPrompter, include_vc: bool) -> int:
    candidates = service.find_candidates(include_vc)
    if not candidates:
        prompter.notify(UP_TO_DATE_MESSAGE)
        return EXIT_OK
    for candidate in candidates:
        prompter.notify(format_candidate(candidate))
    return EXIT_OK


def _finish(prompter: TerminalPrompter, outcome: BatchOutcome, *, quiet_when_empty: bool = False) -> int:
    if not outcome.candidates:
        if not quiet_when_empty:
            prompter.notify(UP_TO_DATE_MESSAGE)
        return EXIT_OK
    prompter.report(outcome)
    return EXIT_OK if outcome.is_success else EXIT_PARTIAL_FAILURE


def _refresh(service: UpgradeService, prompter: TerminalPrompter, *, force: bool) -> int:
    if not force and not service.needs_refresh():
        last = service.refresh_state().last_refresh
        prompter.notify(f"Package metadata is fresh (last refreshed {last:%Y-%m-%d %H:%M}).")
        return EXIT_OK
    try:
        service.refresh()
    except PackageStoreError as exc:
        _LOGGER.error("Metadata refresh failed: %s", exc)
        prompter.notify(f"Metadata refresh failed: {exc}")
        return EXIT_PARTIAL_FAILURE
    prompter.notify("Package metadata refreshed.")
    return EXIT_OK


def _wait_for_schedule(job: ScheduledJob, prompter: TerminalPrompter, wait: Callable[[], None]) -> int:
    prompter.notify(f"Daily upgrade scheduled at {job.spec}; next run {job.next_run:%Y-%m-%d %H:%M}.")
    try:
        wait()
    except KeyboardInterrupt:
        prompter.notify("Stopping scheduler.")
    finally:
        job.cancel()
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
