import argparse
import os
from functools import lru_cache
from pathlib import Path


def _add_token_args(parser: argparse.ArgumentParser, side: str) -> None:
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        f"--{side}-token",
        type=int,
        help=f"Token of the {side} row on the ring (0 <= token < 2^128)"
    )
    group.add_argument(
        f"--{side}-key",
        type=str,
        help=f"Partition key of the {side} row, hashed to a token"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="viewring",
        description=(
            "Resolve materialized view replicas.\n\n"
            "For a base row and its view row, find the view replica each base\n"
            "replica forwards the view mutation to."
        ),
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to a viewring configuration file"
    )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help=(
            "Logging verbosity.\n"
            "Choose among: DEBUG, INFO, WARNING, ERROR, CRITICAL.\n\n"
            "DEBUG    → every pairing decision is logged.\n"
            "INFO     → topology loading.\n"
            "WARNING  → pending endpoint fallbacks (default).\n"
            "ERROR    → only errors.\n"
            "CRITICAL → only critical failures.\n\n"
            "Example:\n"
            "  --log-level DEBUG"
        ),
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        default="yaml",
        choices=["yaml", "json"],
        help="Output format (default: yaml)"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    resolve = commands.add_parser(
        "resolve",
        help="View replica the local node writes to"
    )
    resolve.add_argument("--keyspace", required=True)
    _add_token_args(resolve, "base")
    _add_token_args(resolve, "view")
    resolve.add_argument(
        "--node",
        type=str,
        help="Resolve as this node instead of the configured local node"
    )

    plan = commands.add_parser(
        "plan",
        help="View replica of every base replica of the local datacenter"
    )
    plan.add_argument("--keyspace", required=True)
    _add_token_args(plan, "base")
    _add_token_args(plan, "view")

    replicas = commands.add_parser(
        "replicas",
        help="Natural and pending replicas of a token"
    )
    replicas.add_argument("--keyspace", required=True)
    group = replicas.add_mutually_exclusive_group(required=True)
    group.add_argument("--token", type=int)
    group.add_argument("--key", type=str)

    return parser


@lru_cache
def get_cli_args() -> argparse.Namespace:
    return build_parser().parse_args()


@lru_cache
def get_configfile() -> Path:
    args = get_cli_args()

    # Priority: CLI > ENV > default file in current working directory
    raw = args.config or os.getenv("VIEWRINGCONFIG")

    if raw is None:
        file = Path.cwd() / "viewring.yaml"
    else:
        file = Path(raw)

    if not file.is_file():
        raise SystemExit(
            f"[config] Configuration file not found: '{file}'.\n"
            "  - Use --config <file.yaml>\n"
            "  - Or set the VIEWRINGCONFIG environment variable\n"
            "  - Or place a 'viewring.yaml' file in the current working directory."
        )

    return file
