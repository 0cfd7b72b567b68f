import argparse
import json
import signal
import sys
from typing import Iterable, Optional

from rich.console import Console
from rich.table import Table

from . import __version__
from .config import SINK_TYPES, PushSinkConfig, load_config
from .dispatch import Dispatcher, DispatchReport
from .exceptions import ConfigError, PipeError
from .logutil import configure_logging, get_logger
from .metrics import Counters
from .parsers import parse_line
from .pipe import read_pipe
from .records import ParseFailure
from .templates import render

logger = get_logger("cli")


def process_line(line: str, dispatcher: Dispatcher, counters: Optional[Counters] = None) -> Optional[DispatchReport]:
    """Parse one line and dispatch it; invalid lines are logged and dropped."""
    if not line.strip():
        return None
    result = parse_line(line)
    if isinstance(result, ParseFailure):
        logger.warning("Invalid xferlog line: %r", result.raw_line)
        if counters is not None:
            counters.line(parsed=False)
        return None
    if counters is not None:
        counters.line(parsed=True)
    return dispatcher.dispatch(result)


def process_stream(lines: Iterable[str], dispatcher: Dispatcher, counters: Optional[Counters] = None) -> int:
    """Process lines strictly one after another. Returns the number of records dispatched."""
    dispatched = 0
    for line in lines:
        if process_line(line, dispatcher, counters) is not None:
            dispatched += 1
    return dispatched


def _console(args: argparse.Namespace) -> Console:
    return Console(no_color=getattr(args, "no_color", False), highlight=False)


def cmd_run(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2
    pipe_path = args.pipe or config.pipe
    counters = Counters()
    dispatcher = Dispatcher(config.outputs, counters=counters)
    enabled = dispatcher.enabled()
    if enabled:
        logger.info("Enabled outputs: %s", ", ".join(f"{t} x{len(config.outputs[t])}" for t in enabled))
    else:
        logger.warning("No outputs configured; transfers will only be parsed")

    if args.status_port:
        try:
            from .service import build_app, serve_in_background
        except RuntimeError as exc:
            logger.error("--status-port: %s", exc)
            return 2
        serve_in_background(build_app(counters, config), args.status_host, args.status_port)
        logger.info("Status service on http://%s:%d", args.status_host, args.status_port)

    # SIGTERM behaves like Ctrl-C so a blocking pipe open is interrupted too.
    def _sigterm_handler(signum, frame):  # pragma: no cover - exercised indirectly
        raise KeyboardInterrupt
    try:
        _old_sigterm = signal.signal(signal.SIGTERM, _sigterm_handler)
    except (ValueError, OSError):  # pragma: no cover - not in main thread
        _old_sigterm = None

    status = 0
    try:
        lines = read_pipe(pipe_path, create=not args.no_create, follow=args.follow, on_reopen=counters.reopened)
        logger.info("Reading transfers from %s", pipe_path)
        process_stream(lines, dispatcher, counters)
    except PipeError as exc:
        logger.error("%s", exc)
        status = 1
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
    finally:
        if _old_sigterm is not None:
            signal.signal(signal.SIGTERM, _old_sigterm)
        logger.info("summary: %s", counters.summary())
    return status


def cmd_parse(args: argparse.Namespace) -> int:
    result = parse_line(args.line)
    if isinstance(result, ParseFailure):
        print(f"[xfernotify] invalid line: {result.reason}", file=sys.stderr)
        return 1
    data = result.to_dict()
    if args.json:
        print(json.dumps(data, indent=2))
        return 0
    table = Table(show_header=True, header_style="bold")
    table.add_column("field")
    table.add_column("value")
    for key, value in data.items():
        if key != "raw_line":
            table.add_row(key, str(value))
    _console(args).print(table)
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    result = parse_line(args.line)
    if isinstance(result, ParseFailure):
        print(f"[xfernotify] invalid line: {result.reason}", file=sys.stderr)
        return 1
    print(render(args.template, result))
    return 0


def cmd_check_config(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config)
    except ConfigError as exc:
        print(f"[xfernotify] {exc}", file=sys.stderr)
        for err in exc.details.get("errors", []):
            loc = ".".join(str(p) for p in err.get("loc", ()))
            print(f"  {loc}: {err.get('msg')}", file=sys.stderr)
        return 2
    print(f"pipe: {config.pipe}")
    warnings = 0
    for sink_type in SINK_TYPES:
        instances = config.outputs.get(sink_type, ())
        print(f"{sink_type}: {len(instances)} instance(s)")
        for index, instance in enumerate(instances):
            if isinstance(instance, PushSinkConfig) and not instance.token:
                print(f"  warning: {sink_type}[{index}] has no token and will never notify", file=sys.stderr)
                warnings += 1
    return 1 if warnings and args.strict else 0


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-v info, -vv debug)")
    common.add_argument("-q", "--quiet", action="store_true", help="Only log errors")

    parser = argparse.ArgumentParser(prog="xfernotify", description="Route FTP transfer log lines to files, syslog and push notifications.")
    # Global --version (argparse will exit 0 before validating subcommands)
    parser.add_argument(
        "--version",
        action="version",
        version=f"xfernotify {__version__}",
        help="Show version and exit",
    )
    sub = parser.add_subparsers(dest="cmd")

    run_parser = sub.add_parser("run", parents=[common], help="Read the transfer log pipe and dispatch each transfer")
    run_parser.add_argument("--config", help="YAML config file (default: $XFERNOTIFY_CONFIG or /etc/xfernotify.yml)")
    run_parser.add_argument("--pipe", help="Named pipe to read (overrides the config file)")
    run_parser.add_argument("--no-create", action="store_true", help="Fail instead of creating the pipe when it is missing")
    run_parser.add_argument("--follow", action="store_true", help="When --pipe is a regular file, keep polling it for new lines")
    run_parser.add_argument("--status-port", type=int, help="Serve /healthz and /stats on this port (requires xfernotify[server])")
    run_parser.add_argument("--status-host", default="127.0.0.1")
    run_parser.set_defaults(func=cmd_run)

    parse_parser = sub.add_parser("parse", parents=[common], help="Parse one xferlog line and show its fields")
    parse_parser.add_argument("line", help="A single xferlog line (quote it)")
    parse_parser.add_argument("--json", action="store_true", help="Print fields as JSON")
    parse_parser.add_argument("--no-color", action="store_true", help="Disable colorized output")
    parse_parser.set_defaults(func=cmd_parse)

    render_parser = sub.add_parser("render", parents=[common], help="Render a notification template against a line")
    render_parser.add_argument("template", help="Template such as '%%u %%A file %%f'")
    render_parser.add_argument("line", help="A single xferlog line (quote it)")
    render_parser.set_defaults(func=cmd_render)

    check_parser = sub.add_parser("check-config", parents=[common], help="Validate a config file and list its outputs")
    check_parser.add_argument("config", nargs="?", help="YAML config file (default: $XFERNOTIFY_CONFIG or /etc/xfernotify.yml)")
    check_parser.add_argument("--strict", action="store_true", help="Exit 1 when warnings are found")
    check_parser.set_defaults(func=cmd_check_config)

    # Simple 'version' subcommand for shells/users preferring explicit command
    version_parser = sub.add_parser("version", help="Show version and exit")
    version_parser.set_defaults(func=lambda _: (print(f"xfernotify {__version__}"), 0)[1])

    return parser


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "cmd", None):  # No subcommand provided
        parser.print_help()
        return 0
    configure_logging(getattr(args, "verbose", 0), getattr(args, "quiet", False))
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
