"""
CLI entry point for esgen.

Usage:
    esgen parse <file>                 Parse a data file and show a node summary
    esgen format <file>                Rewrite a data file in canonical form
    esgen shuffle <data> -o <zip>      Generate a System Shuffler plugin
    esgen full-map <data> -o <zip>     Generate a Full Map plugin
"""

import argparse
import logging
import sys
from pathlib import Path

from esgen import __version__
from esgen.errors import EsgenError


def _write_archive(result, output: str) -> None:
    try:
        Path(output).write_bytes(result.data)
    except OSError as e:
        raise EsgenError(f"Could not write {output}: {e}") from e
    print(f"Wrote {output} ({result.size:,} bytes, {len(result.files)} entries)")
    if result.diagnostics:
        print(f"{len(result.diagnostics)} parser diagnostics (see log)")


def cmd_parse(args):
    """Parse a file and show a node summary."""
    from .parser import parse_file_recovering

    result = parse_file_recovering(args.file)
    children = result.ast.children

    print(f"Parsed: {args.file}")
    print(f"Top-level nodes: {len(children)}")

    if args.verbose:
        for child in children[:20]:
            print(f"  - {' '.join(child.tokens[:2])}")
        if len(children) > 20:
            print(f"  ... and {len(children) - 20} more")

    for diagnostic in result.diagnostics:
        print(diagnostic, file=sys.stderr)

    return 0 if result.success else 1


def cmd_format(args):
    """Rewrite a data file with tab indentation and canonical quoting."""
    from .parser import WriterOptions, parse_file

    options = WriterOptions(indent_char=" ", indent_size=args.spaces) if args.spaces else WriterOptions()
    text = parse_file(args.file).to_text(options) + "\n"

    if args.inplace:
        with open(args.file, 'w', encoding='utf-8') as f:
            f.write(text)
        print(f"Formatted: {args.file}")
    else:
        print(text, end="")

    return 0


def cmd_shuffle(args):
    """Generate a System Shuffler plugin."""
    from .parser import read_data_folder
    from .generators.system_shuffler import SystemShufflerConfig, generate_system_shuffler

    config = SystemShufflerConfig(
        seed=args.seed,
        max_presets=args.max_presets,
        shuffle_chance=args.shuffle_chance,
        fixed_shuffle_days=args.fixed_shuffle_days,
        shuffle_once_on_install=args.shuffle_once_on_install,
    )
    result = generate_system_shuffler(read_data_folder(args.data), config)
    _write_archive(result, args.output)
    return 0


def cmd_full_map(args):
    """Generate a Full Map plugin."""
    from .parser import read_data_folder
    from .generators.full_map import generate_full_map

    result = generate_full_map(read_data_folder(args.data))
    _write_archive(result, args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="esgen",
        description="Endless Sky plugin generators",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    esgen parse data/map\\ systems.txt -v
    esgen shuffle path/to/endless-sky/data -o shuffler.zip --seed 42 --shuffle-chance 5
    esgen full-map path/to/endless-sky/data -o full-map.zip
"""
    )
    parser.add_argument('--version', action='version', version=f'esgen {__version__}')
    parser.add_argument('-v', '--verbose', dest='debug', action='store_true', help='Debug logging')
    parser.add_argument('-q', '--quiet', action='store_true', help='Only log warnings')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # parse
    parse_p = subparsers.add_parser('parse', help='Parse a data file')
    parse_p.add_argument('file', help='File to parse')
    parse_p.add_argument('-v', '--verbose', action='store_true', help='List top-level nodes')
    parse_p.set_defaults(func=cmd_parse)

    # format
    format_p = subparsers.add_parser('format', help='Format a data file')
    format_p.add_argument('file', help='File to format')
    format_p.add_argument('-i', '--inplace', action='store_true', help='Modify in place')
    format_p.add_argument('--spaces', type=int, default=0, help='Indent with N spaces instead of tabs')
    format_p.set_defaults(func=cmd_format)

    # shuffle
    shuffle_p = subparsers.add_parser('shuffle', help='Generate a System Shuffler plugin')
    shuffle_p.add_argument('data', help='Data folder (or single data file)')
    shuffle_p.add_argument('-o', '--output', required=True, help='Output zip path')
    shuffle_p.add_argument('--seed', type=int, default=0)
    shuffle_p.add_argument('--max-presets', type=int, default=10)
    shuffle_p.add_argument('--shuffle-chance', type=int, default=0, help='Percent chance per landing')
    shuffle_p.add_argument('--fixed-shuffle-days', type=int, default=0, help='0 disables')
    shuffle_p.add_argument('--shuffle-once-on-install', action='store_true')
    shuffle_p.set_defaults(func=cmd_shuffle)

    # full-map
    full_map_p = subparsers.add_parser('full-map', help='Generate a Full Map plugin')
    full_map_p.add_argument('data', help='Data folder (or single data file)')
    full_map_p.add_argument('-o', '--output', required=True, help='Output zip path')
    full_map_p.set_defaults(func=cmd_full_map)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    level = logging.INFO
    if args.debug:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        return args.func(args)
    except (EsgenError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
