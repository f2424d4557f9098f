"""Command-line interface router for qcl."""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from qcl.coerce import DEFAULT_SEPARATOR
from qcl.errors import ConfigTypeError
from qcl.loader import Source, dump_effective_config, load
from qcl.sources.env import DEFAULT_ENV_TAG, EnvOptions, EnvSource
from qcl.sources.flags import DEFAULT_FLAG_TAG, FlagOptions, FlagSource
from qcl.ui.render import create_renderer
from qcl.walker import field_names


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 2

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router."""

    parser = argparse.ArgumentParser(
        prog="qcl",
        description=(
            "qcl — inspect how dataclass configs map to environment variables and flags.\n\n"
            "Common workflows:\n"
            "  qcl names app.settings:Config --prefix APP\n"
            "  qcl show app.settings:Config --prefix APP -- --db.port 5433\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("target", help="Config dataclass as 'module:ClassName'.")
    common.add_argument("--prefix", default="", help="Environment variable prefix.")
    common.add_argument(
        "--env-tag", default=DEFAULT_ENV_TAG, help="Field metadata key for env name overrides."
    )
    common.add_argument(
        "--flag-tag", default=DEFAULT_FLAG_TAG, help="Field metadata key for flag name overrides."
    )
    common.add_argument(
        "--separator", default=DEFAULT_SEPARATOR, help="Separator for list and dict values."
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Log every field a source sets (to stderr).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    names_parser = subparsers.add_parser(
        "names",
        parents=[common],
        help="List the env variable and flag name of every field",
    )
    names_parser.set_defaults(handler=_cmd_names)

    show_parser = subparsers.add_parser(
        "show",
        parents=[common],
        help="Load the config from the environment and flags and print it as JSON",
        description="Arguments after '--' are parsed as config flags.",
    )
    show_parser.add_argument(
        "--no-env", action="store_true", default=False, help="Skip environment variables."
    )
    show_parser.set_defaults(handler=_cmd_show)

    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    args = list(argv) if argv is not None else sys.argv[1:]
    passthrough: list[str] = []
    if "--" in args:
        split = args.index("--")
        args, passthrough = args[:split], args[split + 1 :]
    namespace = parser.parse_args(args)
    namespace.flags = passthrough
    _configure_logging(verbose=bool(getattr(namespace, "verbose", False)))
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_names(args: argparse.Namespace) -> int:
    cls = _import_target(args.target)
    env_naming = EnvOptions(prefix=args.prefix, tag=args.env_tag).naming()
    flag_naming = FlagOptions(tag=args.flag_tag).naming()

    env_refs = field_names(cls, env_naming)
    flag_refs = {ref.path: ref for ref in field_names(cls, flag_naming)}

    rows: list[list[str]] = []
    for ref in env_refs:
        flag_ref = flag_refs.get(ref.path)
        is_struct = ref.shape.target.struct is not None
        flag = f"--{flag_ref.name}" if flag_ref is not None and not is_struct else "-"
        rows.append([ref.attribute_path, ref.name, flag, str(ref.shape)])

    renderer = create_renderer(no_color=args.no_color)
    renderer.table(["field", "env", "flag", "type"], rows, title=cls.__name__)
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    cls = _import_target(args.target)
    try:
        config = cls()
    except TypeError as exc:
        raise CLIError(f"{args.target} cannot be created without arguments: {exc}") from exc

    sources: list[Source] = []
    if not args.no_env:
        sources.append(EnvSource(prefix=args.prefix, tag=args.env_tag, separator=args.separator))
    sources.append(FlagSource(args.flags, tag=args.flag_tag, separator=args.separator))

    load(config, *sources)
    print(dump_effective_config(config))
    return 0


def _configure_logging(*, verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=False,
    )


def _import_target(target: str) -> type:
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise CLIError(f"target must look like 'module:ClassName', got {target!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise CLIError(f"cannot import module {module_name!r}: {exc}") from exc

    obj: object = module
    for part in attribute.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise CLIError(f"{module_name!r} has no attribute {attribute!r}") from exc
    if not isinstance(obj, type):
        raise ConfigTypeError(obj)
    return obj


__all__ = ["CLIError", "build_parser", "run_cli"]
