# controller/cli_controller.py
import argparse
import sys
from typing import NoReturn, Optional, Sequence
from util.constants import CliDefaults
from util.enums import ExitCode


class ReaperArgumentParser(argparse.ArgumentParser):
    # Bad flags are a usage error: usage on stderr, exit 1 (argparse uses 2).
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(ExitCode.FAILURE, f"{self.prog}: error: {message}\n")


def build_parser() -> ReaperArgumentParser:
    # -h is the Redis host, so help lives on --help only.
    parser = ReaperArgumentParser(
        prog=CliDefaults.PROG,
        add_help=False,
        description="Delete files whose mtime is past the retention window, "
        "claiming candidates from a shared Redis sorted set.",
    )
    parser.add_argument("--help", action="help", help="show this help message and exit")
    parser.add_argument(
        "-h", dest="host", metavar="<redis_hostname>", default=None,
        help=f"Redis host (default {CliDefaults.HOST})",
    )
    parser.add_argument(
        "-p", dest="port", metavar="<redis_port>", type=int, default=None,
        help=f"Redis port (default {CliDefaults.PORT})",
    )
    parser.add_argument("--batch-size", type=int, default=None, help="keys per claim")
    parser.add_argument(
        "--retention-seconds", type=int, default=None,
        help="files modified within this window are kept",
    )
    parser.add_argument("--index-key", default=None, help="sorted set holding candidates")
    parser.add_argument("--workers", type=int, default=None, help="worker processes")
    parser.add_argument(
        "--delete", action="store_true", default=None,
        help="actually unlink eligible files (off by default)",
    )
    parser.add_argument(
        "--list", nargs=2, type=int, metavar=("LOW", "HIGH"), default=None,
        help="print keys scored in [LOW, HIGH], newest first, and exit",
    )
    parser.add_argument("extra", nargs="*", help=argparse.SUPPRESS)
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    # intermixed so stray positionals anywhere become warnings, not errors
    args = build_parser().parse_intermixed_args(argv)
    for name in ("batch_size", "workers"):
        value = getattr(args, name)
        if value is not None and value < 1:
            build_parser().error(f"--{name.replace('_', '-')} must be >= 1")
    return args
