#!/usr/bin/env python3
import argparse
import logging
import re
import sys

from find_unused_strings import (
    ResourceNotFound,
    UnusedStringsError,
    add_common_arguments,
    collect,
    get_unused_strings,
    resolve_run,
    setup_logging,
)

logger = logging.getLogger(__name__)

ENTRY_RE = re.compile(r'^\s*"([^"]*)"\s*=')
COMMENT_RE = re.compile(r'^\s*/\*.*\*/\s*$')
ANY_ENTRY_RE = re.compile(r'"[^"]*"\s*=')


def remove_keys_from_strings(file_path, keys_to_remove, dry_run=False):
    """Remove entries for the given keys from a strings file

    Returns the removed keys, in file order. A single-line /* */ comment
    directly above a removed entry goes with it.
    """
    keys_to_remove = set(keys_to_remove)
    try:
        with open(file_path, 'r', encoding='utf-8', newline='\n') as f:
            lines = f.readlines()
    except (OSError, UnicodeDecodeError) as e:
        raise ResourceNotFound(f"Failed to read {file_path}: {e}") from e

    new_lines = []
    removed = []
    for line in lines:
        match = ENTRY_RE.match(line)
        if match and match.group(1) in keys_to_remove:
            if len(ANY_ENTRY_RE.findall(line)) > 1:
                logger.warning(f"{file_path}: leaving line with several entries alone: "
                               f"{line.strip()}")
                new_lines.append(line)
                continue
            removed.append(match.group(1))
            if new_lines and COMMENT_RE.match(new_lines[-1]):
                new_lines.pop()
            continue
        new_lines.append(line)

    if removed and not dry_run:
        try:
            with open(file_path, 'w', encoding='utf-8', newline='') as f:
                f.writelines(new_lines)
        except OSError as e:
            raise UnusedStringsError(f"Failed to write {file_path}: {e}") from e

    return removed, len(lines) - len(new_lines)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Remove unused localization strings from the strings file.")
    add_common_arguments(parser)
    parser.add_argument("--dry-run", action="store_true",
                        help="Only show what would be removed")
    args = parser.parse_args(argv)
    setup_logging()

    try:
        directory, config = resolve_run(args)
        declared_keys, usages = collect(directory, config)
        strings_path = directory / config["strings_file"]

        print(f"Processing {strings_path}...")
        unused = get_unused_strings(declared_keys, usages)
        removed, removed_lines = remove_keys_from_strings(strings_path, unused, args.dry_run)
    except UnusedStringsError as e:
        logger.error(str(e))
        return 1

    for key in removed:
        print(f"  - {key}")
    verb = "Would remove" if args.dry_run else "Removed"
    print(f"  {verb} {removed_lines} lines")

    print("\nDone! Please review the changes.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
