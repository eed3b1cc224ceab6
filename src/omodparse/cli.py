"""omodparse CLI: inspect and verify module archives."""

import argparse
import json
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path


def _print_summary(descriptor) -> None:
    print(f"  Name: {descriptor.name}")
    print(f"  Id: {descriptor.module_id}")
    print(f"  Package: {descriptor.package_name}")
    print(f"  Version: {descriptor.version or '-'}")
    print(f"  Config version: {descriptor.config_version}")
    print(f"  Mandatory: {'yes' if descriptor.mandatory else 'no'}")
    if descriptor.required_modules:
        print("  Required modules:")
        for module_id, module_version in sorted(descriptor.required_modules.items()):
            print(f"    {module_id} {module_version or '(any version)'}")
    print(f"  Extension points: {len(descriptor.extension_points)}")
    print(f"  Advice points: {len(descriptor.advice_points)}")
    print(f"  Privileges: {len(descriptor.privileges)}")
    print(f"  Global properties: {len(descriptor.global_properties)}")
    print(f"  Conditional resources: {len(descriptor.conditional_resources)}")


def main():
    """Main CLI entry point for omodparse commands."""
    try:
        omodparse_version = get_version("omodparse")
    except PackageNotFoundError:
        omodparse_version = "dev"

    parser = argparse.ArgumentParser(
        prog="omodparse",
        description="omodparse: parse and validate module archive descriptors"
    )
    parser.add_argument("--version", action="version", version=f"omodparse {omodparse_version}")
    # Common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    parent_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log parser debug output to stderr."
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Parse a module archive and print its descriptor",
        parents=[parent_parser]
    )
    inspect_parser.add_argument("module_file", type=Path, help="Path to the module archive")
    inspect_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the descriptor as JSON instead of a summary"
    )

    verify_parser = subparsers.add_parser(
        "verify",
        help="Check that a module archive parses, reporting errors and warnings",
        parents=[parent_parser]
    )
    verify_parser.add_argument("module_file", type=Path, help="Path to the module archive")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if args.quiet and not args.verbose:
        logging.getLogger("omodparse").setLevel(logging.ERROR)

    # Lazy import: only load the parser stack once a command runs
    from .api import inspect_module_file, parse_module_file
    from .errors import ModuleError

    if args.command == "inspect":
        try:
            descriptor = parse_module_file(args.module_file.resolve())
        except ModuleError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except Exception as e:
            print(f"Unexpected error: {e}", file=sys.stderr)
            import traceback
            traceback.print_exc()
            sys.exit(1)

        if args.json:
            print(json.dumps(descriptor.to_summary_dict(), indent=2, sort_keys=True))
        elif not args.quiet:
            print(f"[OK] {args.module_file.name}")
            _print_summary(descriptor)
            if descriptor.warnings:
                print(f"  Warnings: {len(descriptor.warnings)}")
                for warning in descriptor.warnings:
                    print(f"    - {warning}")
        sys.exit(0)
    elif args.command == "verify":
        result = inspect_module_file(args.module_file.resolve())
        if not args.quiet:
            status = "OK" if result.ok else "FAILED"
            print(f"[{status}] Verification complete")
            print(f"  Errors: {len(result.errors)}")
            print(f"  Warnings: {len(result.warnings)}")
        for issue in result.errors:
            print(f"Error: {issue.message}", file=sys.stderr)
        sys.exit(0 if result.ok else 1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
