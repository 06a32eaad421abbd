"""Undercroft CLI entry point.

Provides subcommands for running the level API server, generating a single
level to stdout or a file, and sweeping seeds for structural problems.
Accepts configuration via flags and environment variables, with optional
.env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import signal
import sys
from pathlib import Path
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

_color_init()

# Disable colors if output is not a real terminal (e.g., during pytest capture)
_COLOR_ENABLED = sys.stdout.isatty()

_VERSION_FILE = Path(__file__).resolve().parent / "VERSION"


def _load_version() -> str:
    try:
        return _VERSION_FILE.read_text(encoding="utf-8").strip()
    except OSError:
        return "0.0.0"


__version__ = _load_version()


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    Undercroft Level Generator

    Serve generated dungeon levels over HTTP, print a single level, or check
    a batch of seeds for structural problems. Configuration can be provided
    via CLI flags or environment variables. If both are present, CLI flags
    take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST                      Bind address for the web server (default: 0.0.0.0)
          PORT                      Port for the web server (default: 5000)
          UNDERCROFT_LOG_LEVEL      debug | info | warn | error (default: info)
          UNDERCROFT_LOG_JSON       Emit JSON log lines when set to 1
          UNDERCROFT_DISABLE_CACHE  Regenerate levels on every request when set to 1
          UNDERCROFT_LEVEL_*        LevelConfig overrides, e.g. UNDERCROFT_LEVEL_ROOM_COUNT=6,9

        Examples:
          # Run the server on the default host and port
          python run.py server

          # Print the ASCII map for seed 42, third depth
          python run.py generate --seed 42 --depth 3

          # Save a JSON snapshot
          python run.py generate --seed 42 --format json --out level.json

          # Check fifty seeds for invariant violations
          python run.py check --seeds 50
        """
    )

    parser = argparse.ArgumentParser(
        prog="Undercroft",
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
        version=f"Undercroft Level Generator {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # server subcommand
    server_parser = subparsers.add_parser(
        "server",
        help="Run the level API web server",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the Flask level API server",
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
        "--debug",
        action="store_true",
        help="Enable Flask debug mode with verbose error pages",
    )
    server_parser.set_defaults(command="server")

    # generate subcommand
    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate one level and print it",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    gen_parser.add_argument("--seed", type=int, default=None, help="Base seed (default: random)")
    gen_parser.add_argument("--depth", type=int, default=1, help="Dungeon depth (default: 1)")
    gen_parser.add_argument("--width", type=int, default=None, help="Map width (default: config)")
    gen_parser.add_argument("--height", type=int, default=None, help="Map height (default: config)")
    gen_parser.add_argument(
        "--format",
        dest="fmt",
        choices=("ascii", "json"),
        default="ascii",
        help="Output format (default: ascii)",
    )
    gen_parser.add_argument("--out", default=None, help="Write to this file instead of stdout")
    gen_parser.set_defaults(command="generate")

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Generate levels for many seeds and report invariant violations",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    check_parser.add_argument("seed_list", nargs="*", type=int, help="Explicit seeds to check")
    check_parser.add_argument("--seeds", type=int, default=20, help="Check seeds 1..N when none are listed")
    check_parser.add_argument("--depth", type=int, default=1, help="Dungeon depth (default: 1)")
    check_parser.set_defaults(command="check")

    # If no subcommand provided, default to server
    if len(argv) == 0:
        argv = ["server"]

    args = parser.parse_args(argv)
    if args.command is None:
        args.command = "server"
    return args


def _level_config():
    from undercroft.level import LevelConfig

    return LevelConfig.from_mapping(os.environ)


def _cmd_generate(args) -> int:
    from dataclasses import replace

    from undercroft.level import Level

    config = _level_config()
    if args.width is not None or args.height is not None:
        try:
            config = replace(config, width=args.width or config.width, height=args.height or config.height)
        except ValueError as e:
            print(f"[ERROR] {e}", file=sys.stderr)
            return 2
    level = Level(config, seed=args.seed, depth=args.depth)
    if args.fmt == "json":
        payload = level.to_dict()
        payload["start"] = list(level.get_start_position())
        text = json.dumps(payload)
    else:
        text = level.to_ascii()
    if args.out:
        Path(args.out).write_text(text + "\n", encoding="utf-8")
        print(f"[INFO] Wrote level seed={level.seed} depth={level.depth} to {args.out}")
    else:
        print(text)
    return 0


def _cmd_check(args) -> int:
    from undercroft.level import Level, validate_level

    config = _level_config()
    seeds = args.seed_list or list(range(1, args.seeds + 1))
    failures = 0
    for seed in seeds:
        level = Level(config, seed=seed, depth=args.depth)
        problems = validate_level(level)
        if problems:
            failures += 1
            tag = f"{Fore.RED}FAIL{Style.RESET_ALL}" if _COLOR_ENABLED else "FAIL"
            print(f"{tag} seed={seed}")
            for p in problems:
                print(f"    {p}")
        else:
            tag = f"{Fore.GREEN}ok{Style.RESET_ALL}" if _COLOR_ENABLED else "ok"
            print(f"{tag}   seed={seed} rooms={len(level.rooms)}")
    print(f"[INFO] {len(seeds) - failures}/{len(seeds)} seeds passed")
    return 1 if failures else 0


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        # Load default .env if present (no error if missing)
        load_dotenv()

    mode = (getattr(args, "command", None) or "server").lower()
    if mode == "generate":
        return _cmd_generate(args)
    if mode == "check":
        return _cmd_check(args)

    # Resolve configuration from CLI flags or env vars
    env_host = os.getenv("HOST", "0.0.0.0")
    env_port = int(os.getenv("PORT", "5000"))
    host = getattr(args, "host", None) or env_host
    port = int(getattr(args, "port", None) or env_port)
    debug = bool(getattr(args, "debug", False) or os.getenv("FLASK_DEBUG") == "1")

    def handle_sigint(sig, frame):
        print("\n[INFO] Shutting down server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_sigint)

    # Import server entrypoint only after environment is ready
    from undercroft.logging_utils import log
    from undercroft.server import start_server

    title = (
        f"{Fore.CYAN}{Style.BRIGHT}Undercroft Level Server{Style.RESET_ALL}"
        if _COLOR_ENABLED
        else "Undercroft Level Server"
    )

    def label(text: str) -> str:
        return f"{Fore.YELLOW}{text}{Style.RESET_ALL}" if _COLOR_ENABLED else text

    def value(val: str | int) -> str:
        return f"{Fore.GREEN}{val}{Style.RESET_ALL}" if _COLOR_ENABLED else str(val)

    divider = (Fore.MAGENTA + "=" * 40 + Style.RESET_ALL) if _COLOR_ENABLED else "=" * 40
    cache = "disabled" if os.getenv("UNDERCROFT_DISABLE_CACHE") == "1" else "enabled"
    lines = [
        divider,
        f"  {title}",
        divider,
        f"  {label('Mode:'):12} {value(mode.upper())}",
        f"  {label('Host:'):12} {value(host)}",
        f"  {label('Port:'):12} {value(port)}",
        f"  {label('Cache:'):12} {value(cache)}",
        f"  {label('Debug:'):12} {value('YES' if debug else 'NO')}",
        divider,
        "",
    ]
    print("\n".join(lines))
    log.info(event="startup", mode=mode, host=host, port=port, debug=debug)
    start_server(host=host, port=port, debug=debug)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
