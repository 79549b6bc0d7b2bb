#!/usr/bin/env python3
"""
Move string keys between Redis and a JSON dump file.

    redis_mover.py --export --file dump.json --redis localhost:6379@0,1 [--pattern user:]
    redis_mover.py --import --file dump.json --redis localhost:6379@2
"""

import argparse
import os
import sys
import traceback

from export_from_redis import export_to_json
from import_to_redis import import_from_json
from mover_errors import ConflictError, MoverError, UsageError
from redis_target import connect, parse_target

REDIS_ENV = "REDIS_MOVER_REDIS"


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


def build_parser():
    parser = _ArgumentParser(description="Export/import Redis string keys to/from a JSON file")
    parser.add_argument("--export", dest="do_export", action="store_true", help="export redis to file")
    parser.add_argument("--import", dest="do_import", action="store_true", help="import file to redis")
    parser.add_argument("--file", default="", help="path to data file")
    parser.add_argument("--pattern", default="", help="key prefix to export")
    parser.add_argument(
        "--redis",
        default=os.environ.get(REDIS_ENV, ""),
        help=f"host:port[@db[,db...]], optionally prefixed by [user:]password@ (default: ${REDIS_ENV})",
    )
    return parser


def validate_args(args):
    if not args.do_export and not args.do_import:
        raise UsageError("Need either export or import flag")
    if args.do_export and args.do_import:
        raise UsageError("Need either export or import flag, not both")
    if not args.file:
        raise UsageError("Need data-file location")
    if not args.redis:
        raise UsageError("Need redis url")
    return args


def parse_args(argv=None):
    return validate_args(build_parser().parse_args(argv))


def prompt_confirm(stdin=None):
    if stdin is None:
        stdin = sys.stdin
    print("Continue? [y/N] ", end="", flush=True)
    line = stdin.readline()
    print()
    return line.strip().lower() == "y"


def run_export(args, connect=connect):
    print(f"Exporting data from redis ({args.redis}) to data-file ({args.file})")
    if not prompt_confirm():
        return False
    target = parse_target(args.redis)
    documents = export_to_json(target, args.file, args.pattern, connect=connect, report=print)

    keys = sum(len(doc) for doc in documents.values())
    if len(documents) == 1:
        print(f"\nExport done, {keys} keys exported")
    else:
        print(f"\nExport done, {len(documents)} databases ({keys} keys) exported")
    return True


def run_import(args, connect=connect):
    print(f"Importing data from data-file ({args.file}) to redis ({args.redis})")
    if not prompt_confirm():
        return False
    target = parse_target(args.redis)
    imported = import_from_json(target, args.file, connect=connect, report=print)
    print(f"\nImport done, {imported} keys imported")
    return True


def main(argv=None, connect=connect):
    """Runs one export or import; returns the process exit status."""
    try:
        args = parse_args(argv)
        run = run_export if args.do_export else run_import
        if not run(args, connect=connect):
            print("Aborting...")
        return 0
    except ConflictError as e:
        print(e)
        print("Aborting...")
        return 1
    except MoverError as e:
        print(e)
        return 1
    except KeyboardInterrupt:
        print("\nAborting...")
        return 1
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
