"""Command line entry point: run the API or talk to a running one."""

import argparse
import json
import logging
import sys

import requests

from . import setup_logging, __version__
from .config_manager import ConfigManager
from .icons import DEFAULT_EXTENSION_DIR, generate_icons

logger = logging.getLogger("TabMover.CLI")

API_TIMEOUT = 2.0

MOVE_COMMANDS = {"normal": "move-normal", "incognito": "move-incog"}


def _api_url(args):
    return f"http://{args.host}:{args.port}/tabmover"


def cmd_serve(args):
    from .api import create_app

    setup_logging(ConfigManager(args.config), verbose=args.verbose)
    app = create_app(config_path=args.config)
    logger.info(f"Starting TabMover API server at {_api_url(args)}")
    app.run(host=args.host, port=args.port, threaded=True)
    return 0


def cmd_move(args):
    try:
        response = requests.post(
            f"{_api_url(args)}/commands/{MOVE_COMMANDS[args.mode]}",
            timeout=API_TIMEOUT,
        )
    except requests.RequestException as e:
        print(f"TabMover API unavailable: {e}", file=sys.stderr)
        return 1

    if not response.ok:
        print(f"Command rejected ({response.status_code}): {response.text}", file=sys.stderr)
        return 1
    print(json.dumps(response.json()))
    return 0


def cmd_status(args):
    try:
        response = requests.get(f"{_api_url(args)}/status", timeout=API_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        print(f"TabMover API unavailable: {e}", file=sys.stderr)
        return 1

    print(json.dumps(response.json(), indent=2))
    return 0


def cmd_icons(args):
    for path in generate_icons(args.directory):
        print(path)
    return 0


def build_parser(settings=None):
    settings = settings or {}
    parser = argparse.ArgumentParser(
        prog="tabmover", description="Move the active browser tab to the next display."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--host", default=settings.get("api_host", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=settings.get("api_port", 5556))
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the API server for the extension")
    serve.add_argument("--config", help="path to the settings file")
    serve.add_argument("-v", "--verbose", action="store_true")
    serve.set_defaults(func=cmd_serve)

    move = sub.add_parser("move", help="move the active tab of the current window")
    move.add_argument("mode", choices=sorted(MOVE_COMMANDS))
    move.set_defaults(func=cmd_move)

    status = sub.add_parser("status", help="print the server status")
    status.set_defaults(func=cmd_status)

    icons = sub.add_parser("icons", help="generate the extension icons")
    icons.add_argument("directory", nargs="?", default=DEFAULT_EXTENSION_DIR)
    icons.set_defaults(func=cmd_icons)

    return parser


def main(argv=None, config_path=None):
    settings = ConfigManager(config_path).get_settings()
    args = build_parser(settings).parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
