"""
Command-line exporter for lamp designs.

Usage:
    lampcap presets
    lampcap export [--preset NAME | --design FILE] [--method M] [--ascii] OUT.stl

Examples:
    # Export the bundled standing lamp with its slotted bottom cap
    lampcap export --preset standing standing.stl

    # Export a custom design, forcing the CSG cap strategy
    lampcap -v export --design my_lamp.yaml --method csg my_lamp.stl
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from lampcap.assembly import build_lamp
from lampcap.caps import METHODS
from lampcap.config import ConfigError, list_presets, load_design, load_preset
from lampcap.io import write_stl
from lampcap.logging_config import setup_logging


def cmd_presets(args) -> int:
    for name in list_presets():
        print(name)
    return 0


def cmd_export(args) -> int:
    try:
        if args.design:
            design = load_design(args.design)
        else:
            design = load_preset(args.preset)
        if args.method:
            design = replace(design, method=args.method)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    assembly = build_lamp(design)
    if assembly.failures:
        for name, reason in assembly.failures.items():
            print(f"Warning: {name} cap failed to build, exporting body only: {reason}",
                  file=sys.stderr)

    output = Path(args.output)
    write_stl(assembly, output, binary=not args.ascii, name=design.name)
    print(f"Wrote {output} ({assembly.status})")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog='lampcap',
        description='Organic lamp shade and conforming cap generator',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='action', required=True)

    subparsers.add_parser('presets', help='List available design presets')

    export_parser = subparsers.add_parser('export', help='Export a lamp to STL')
    source = export_parser.add_mutually_exclusive_group()
    source.add_argument('--preset', default='default', help='Preset name')
    source.add_argument('--design', metavar='FILE', help='Design YAML file')
    export_parser.add_argument('--method', choices=METHODS, help='Cap construction strategy')
    export_parser.add_argument('--ascii', action='store_true', help='Write ASCII STL')
    export_parser.add_argument('output', help='Output STL file')

    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if args.action == 'presets':
        return cmd_presets(args)
    elif args.action == 'export':
        return cmd_export(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
