#!/usr/bin/env python3
import argparse
import logging
import sys

from find_unused_strings import (
    UnusedStringsError,
    add_common_arguments,
    collect,
    get_orphan_usages,
    get_unused_strings,
    resolve_run,
    setup_logging,
)

logger = logging.getLogger(__name__)

UNUSED_PREVIEW = 20


def print_orphan_usages(orphans, usages, strings_file):
    print(f"\n=== USAGES MISSING FROM {strings_file} ===")
    if not orphans:
        print("  None")
        return

    for key in orphans:
        locations = ", ".join(f"{occ.filename}:{occ.line}" for occ in usages[key])
        print(f"  - {key} ({locations})")


def print_unused_preview(unused):
    print("\n=== POTENTIALLY UNUSED KEYS ===")
    if len(unused) > UNUSED_PREVIEW:
        print(f"  {len(unused)} keys (showing first {UNUSED_PREVIEW})")
        unused = unused[:UNUSED_PREVIEW]
    elif not unused:
        print("  None")

    for key in unused:
        print(f"  - {key}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Find localization keys used in code but missing from the strings file.")
    add_common_arguments(parser)
    args = parser.parse_args(argv)
    setup_logging()

    try:
        directory, config = resolve_run(args)
        declared_keys, usages = collect(directory, config)
    except UnusedStringsError as e:
        logger.error(str(e))
        return 1

    print(f"Found {len(usages)} unique localization keys used in code")
    print(f"{config['strings_file']} has {len(declared_keys)} keys")

    orphans = get_orphan_usages(declared_keys, usages)
    print_orphan_usages(orphans, usages, config["strings_file"])
    print_unused_preview(get_unused_strings(declared_keys, usages))

    return 1 if orphans else 0


if __name__ == "__main__":
    sys.exit(main())
