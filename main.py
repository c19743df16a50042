# main.py
import logging
import sys
from typing import Optional, Sequence
from config.cache import open_redis, close_redis
from config.settings import settings
from controller.cli_controller import parse_args
from core.entities import ReaperPolicy
from repository.candidate_index_repository import CandidateIndexRepository
from service.diagnostics_service import DiagnosticsService
from service.reaper_service import launch
from util.constants import CliDefaults
from util.enums import Color, ExitCode
from util.errors import ReaperError
from util.functions import printable
from util.logger import init_logger
from util.timing import timed

logger = logging.getLogger(settings.LOGGER_NAME)


def _policy_from_args(args) -> ReaperPolicy:
    base = ReaperPolicy.from_settings(settings)
    return ReaperPolicy(
        index_key=args.index_key or base.index_key,
        batch_size=args.batch_size or base.batch_size,
        retention_seconds=(
            base.retention_seconds
            if args.retention_seconds is None
            else args.retention_seconds
        ),
        delete_enabled=bool(args.delete) or base.delete_enabled,
    )


def _endpoint(args) -> tuple[str, int]:
    host, port = args.host, args.port
    if host is None:
        host = settings.REDIS_HOST or CliDefaults.HOST
        logger.warning("A hostname for redis was not specified, defaulting to %s.", host)
    if port is None:
        port = settings.REDIS_PORT or CliDefaults.PORT
        logger.warning("A port number for redis was not specified, defaulting to %d.", port)
    return host, port


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    init_logger()

    for extra in args.extra:
        logger.warning("Non-option argument %s", extra)

    host, port = _endpoint(args)
    policy = _policy_from_args(args)
    workers = args.workers or settings.WORKERS

    try:
        client = open_redis(host, port)
        try:
            diagnostics = DiagnosticsService(
                CandidateIndexRepository(client), policy.index_key
            )
            if args.list is not None:
                low, high = args.list
                for key in diagnostics.listing(low, high):
                    print(printable(key))
                return ExitCode.SUCCESS
            remaining = diagnostics.remaining()
        finally:
            close_redis(client)

        print(
            f"{Color.GREEN}Reaping {remaining} candidates with {workers} worker(s)...{Color.RESET}",
            file=sys.stderr,
        )
        if not policy.delete_enabled:
            logger.warning("Deletion is disabled; eligible files will only be reported.")

        with timed(logger, "reaper.run", workers=workers):
            stats, code = launch(workers, host, port, policy)
    except ReaperError as e:
        logger.critical("reaper.fatal err=%s", e.message)
        print(f"{Color.RED}Reaper aborted{Color.RESET}", file=sys.stderr)
        return e.exit_code

    logger.info("reaper.summary %s", stats.summary())
    print(f"{Color.BLUE}Reaper finished{Color.RESET}", file=sys.stderr)
    return int(code)


if __name__ == "__main__":
    sys.exit(main())
