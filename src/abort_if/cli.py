"""Command-line interface for abort-if.

Usage:
    abort-if expand example.py
    abort-if build example.py --flag debug --flag feature=x
    abort-if build example.py --abort-mode soft --abort-hook abort_if.hooks:warn --continuation

``expand`` prints the source with both variants of every guarded function.
``build`` also applies the flag assignment and prints what would be compiled.
"""

from __future__ import annotations

import argparse
import ast
import logging
from pathlib import Path
import sys
from typing import TYPE_CHECKING

from abort_if import __version__
from abort_if.conditions.flags import FlagSet
from abort_if.config import AbortMode, load_config, merge_configs
from abort_if.errors import AbortIfError
from abort_if.host.resolver import build_source
from abort_if.transform.transformer import expand_source


if TYPE_CHECKING:
    from collections.abc import Sequence


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the abort-if command."""
    parser = argparse.ArgumentParser(
        prog='abort-if',
        description='Split @abort_if functions into flag-gated variants.',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log each split and dropped variant')
    parser.add_argument(
        '--rootdir',
        type=Path,
        default=Path.cwd(),
        help='Directory holding the pyproject.toml to read [tool.abort-if] from (default: cwd)',
    )

    subparsers = parser.add_subparsers(dest='command', required=True)
    expand = subparsers.add_parser('expand', help='Print both variants of every guarded function')
    build = subparsers.add_parser('build', help='Print the source resolved for a flag assignment')

    for sub in (expand, build):
        sub.add_argument('path', type=Path, help='Python source file')
        sub.add_argument(
            '--abort-mode',
            choices=[mode.value for mode in AbortMode],
            default=None,
            help='Abort mode of the positive variant (default: hard)',
        )
        sub.add_argument(
            '--continuation',
            action=argparse.BooleanOptionalAction,
            default=None,
            help='Keep the original statements after a soft abort',
        )
        sub.add_argument('--abort-hook', default=None, help="Soft abort hook, e.g. 'abort_if.hooks:warn'")

    build.add_argument(
        '--flag',
        dest='flags',
        action='append',
        default=None,
        help="Set a flag: 'name' or 'key=value' (repeatable, comma-separated)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the abort-if command.

    Returns:
        0 on success, 1 on a diagnostic, 2 on invalid configuration.
    """
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(name)s: %(message)s')

    try:
        config = merge_configs(
            load_config(args.rootdir),
            cli_flags=','.join(args.flags) if getattr(args, 'flags', None) else None,
            cli_abort_mode=args.abort_mode,
            cli_continuation=args.continuation,
            cli_abort_hook=args.abort_hook,
        )
    except ValueError as exc:
        print(f'abort-if: {exc}', file=sys.stderr)
        return 2

    try:
        source = args.path.read_text(encoding='utf-8')
    except OSError as exc:
        print(f'abort-if: {exc}', file=sys.stderr)
        return 2
    filename = str(args.path)

    try:
        if args.command == 'expand':
            tree = expand_source(source, config, filename)
        else:
            tree = build_source(source, FlagSet.from_strings(config.flags or []), config, filename)
    except AbortIfError as exc:
        print(f'{exc.location}: error: {exc.message}', file=sys.stderr)
        return 1

    print(ast.unparse(tree))
    return 0


if __name__ == '__main__':
    sys.exit(main())
