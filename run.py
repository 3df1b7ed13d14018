"""Delve dungeon CLI entry point.

Provides subcommands for running the JSON API server and for generating a
single level to the terminal. Accepts configuration via flags and
environment variables, with optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import signal
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

_color_init()
_COLOR_ENABLED = True

# Disable colors if output is not a real terminal (e.g., during pytest capture)
try:
    if not sys.stdout.isatty():  # pragma: no cover - environment dependent
        _COLOR_ENABLED = False
except (AttributeError, ValueError):  # pragma: no cover
    _COLOR_ENABLED = False


def _load_version() -> str:
    path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "VERSION")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read().strip()
    except OSError:
        return "0.1.0"


__version__ = _load_version()


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    Delve Dungeon Server

    Serve the dungeon JSON API or generate a level and print it. Configuration
    can be provided via CLI flags or environment variables. If both are
    present, CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST            Bind address for the web server (default: 0.0.0.0)
          PORT            Port for the web server (default: 5000)
          DUNGEON_SEED    Seed for the served dungeon (default: random)
          DELVE_LOG_LEVEL debug | info | warn | error (default: info)

        Examples:
          # Run the server on the default host and port
          python run.py server

          # Serve a fixed dungeon on a custom port
          python run.py server --port 8080 --seed 42

          # Print level 3 of the main dungeon for seed "crypt"
          python run.py generate --seed crypt --depth 3

          # Dump the first Gnomish Mines level as JSON
          python run.py generate --seed 7 --branch mines --depth 1 --json
        """
    )

    parser = argparse.ArgumentParser(
        prog="Delve",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Delve Dungeon Server {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    server_parser = subparsers.add_parser(
        "server",
        help="Run the dungeon JSON API server",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the Flask dungeon API server",
    )
    server_parser.add_argument(
        "--host",
        default=None,
        help="Host interface to bind (default: env HOST or 0.0.0.0)",
    )
    server_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: env PORT or 5000)",
    )
    server_parser.add_argument(
        "--seed",
        default=None,
        help="Dungeon seed, integer or any string (default: env DUNGEON_SEED or random)",
    )
    server_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable Flask debug mode with verbose error pages",
    )
    server_parser.set_defaults(command="server")

    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate a level and print it",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Generate one level (plus the levels above it) and print the map.",
    )
    gen_parser.add_argument("--seed", default=None, help="Dungeon seed, integer or any string")
    gen_parser.add_argument("--branch", default="main", help="Branch name (default: main)")
    gen_parser.add_argument("--depth", type=int, default=1, help="Depth inside the branch (default: 1)")
    gen_parser.add_argument("--json", action="store_true", help="Print the level as JSON instead of ASCII")
    gen_parser.set_defaults(command="generate")

    # If no subcommand provided, default to server
    if len(argv) == 0:
        argv = ["server"]

    args = parser.parse_args(argv)
    return args


def _generate(args) -> int:
    from delve.dungeon import Dungeon, DungeonBranch, DungeonConfig, Landing, LevelChange, LevelID

    try:
        branch = DungeonBranch.parse(args.branch)
    except ValueError as exc:
        print(f"[ERROR] {exc}")
        return 1
    dungeon = Dungeon(seed=args.seed, config=DungeonConfig.from_env())
    target = LevelID(branch, args.depth)
    if target != dungeon.current_level:
        if dungeon.change_level(LevelChange.teleport(target, Landing.stairs_up())) is None:
            print(f"[ERROR] No such level: {target}")
            return 1
    level = dungeon.current
    if args.json:
        print(json.dumps(level.to_json()))
        return 0
    header = f"{dungeon.describe_current()}  seed={dungeon.seed}  type={level.level_type.value}"
    print(f"{Fore.CYAN}{header}{Style.RESET_ALL}" if _COLOR_ENABLED else header)
    print(level.to_ascii())
    return 0


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        # Load default .env if present (no error if missing)
        load_dotenv()

    mode = (getattr(args, "command", None) or "server").lower()
    if mode == "generate":
        return _generate(args)

    host = getattr(args, "host", None) or os.getenv("HOST", "0.0.0.0")
    port = int(getattr(args, "port", None) or os.getenv("PORT", "5000"))
    seed = getattr(args, "seed", None) or os.getenv("DUNGEON_SEED")

    def handle_sigint(sig, frame):
        print("\n[INFO] Shutting down server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_sigint)

    # Import server entrypoints only after environment is ready
    from delve import server as server_mod
    from delve.logging_utils import log

    title = (
        f"{Fore.CYAN}{Style.BRIGHT}Delve Dungeon Server{Style.RESET_ALL}" if _COLOR_ENABLED else "Delve Dungeon Server"
    )

    def label(text: str) -> str:
        return f"{Fore.YELLOW}{text}{Style.RESET_ALL}" if _COLOR_ENABLED else text

    def value(val: str | int) -> str:
        return f"{Fore.GREEN}{val}{Style.RESET_ALL}" if _COLOR_ENABLED else str(val)

    divider = (Fore.MAGENTA + "=" * 40 + Style.RESET_ALL) if _COLOR_ENABLED else "=" * 40
    lines = [
        divider,
        f"  {title}",
        divider,
        f"  {label('Version:'):12} {value(__version__)}",
        f"  {label('Host:'):12} {value(host)}",
        f"  {label('Port:'):12} {value(port)}",
        f"  {label('Seed:'):12} {value(seed or 'random')}",
        divider,
        "",
    ]
    print("\n".join(lines))

    debug = bool(getattr(args, "debug", False) or os.getenv("FLASK_DEBUG") == "1")
    log.info(event="listen", host=host, port=port, debug=debug)
    server_mod.start_server(host=host, port=port, debug=debug, seed=seed)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
