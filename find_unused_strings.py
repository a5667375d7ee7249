#!/usr/bin/env python3
import argparse
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".unused_strings.yml"

DEFAULT_CONFIG = {
    "strings_file": "en.lproj/Localizable.strings",
    "extension": ".swift",
    "marker": ".loc()",
    "skip_unreadable": False,
}


class UnusedStringsError(Exception):
    """Base class for errors that abort a run"""


class ResourceNotFound(UnusedStringsError):
    pass


class DirectoryUnreadable(UnusedStringsError):
    pass


class SourceFileUnreadable(UnusedStringsError):
    pass


class ConfigError(UnusedStringsError):
    pass


class MalformedUsageSite(ValueError):
    """A marker token without a quoted literal right before it"""


@dataclass(frozen=True)
class Occurrence:
    filename: str
    line: int
    column: int = 0


def load_config(directory, config_path=None, overrides=None):
    """Merge defaults, the YAML config file and command line overrides"""
    config = dict(DEFAULT_CONFIG)

    if config_path is None:
        candidate = Path(directory) / CONFIG_FILE_NAME
        config_path = candidate if candidate.is_file() else None
    elif not Path(config_path).is_file():
        raise ConfigError(f"Config file {config_path} does not exist")

    if config_path is not None:
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read config {config_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config {config_path} must be a mapping")
        if not all(isinstance(key, str) for key in data):
            raise ConfigError(f"Config {config_path} keys must be strings")
        config.update(data)

    for key, value in (overrides or {}).items():
        if value is not None:
            config[key] = value

    _validate_config(config)
    return config


def _validate_config(config):
    unknown = set(config) - set(DEFAULT_CONFIG)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(sorted(map(str, unknown)))}")

    for key in ("strings_file", "extension", "marker"):
        value = config[key]
        if not isinstance(value, str) or not value:
            raise ConfigError(f"Config value '{key}' must be a non-empty string")

    if not isinstance(config["skip_unreadable"], bool):
        raise ConfigError("Config value 'skip_unreadable' must be true or false")


def load_declared_keys(strings_path):
    """Extract every declared key from a Localizable.strings file"""
    try:
        with open(strings_path, 'r', encoding='utf-8') as f:
            content = f.read()
    except FileNotFoundError as e:
        raise ResourceNotFound(f"Failed to find Localizable.strings at {strings_path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ResourceNotFound(f"Failed to read {strings_path}: {e}") from e

    keys = []
    pos = 0
    while True:
        # Entries look like "KEY" = "VALUE"; only the first quoted span is kept
        start = content.find('"', pos)
        if start == -1:
            break

        end = content.find('"', start + 1)
        if end == -1:
            logger.warning(f"{strings_path}: unterminated key at offset {start}")
            break

        keys.append(content[start + 1:end])

        semicolon = content.find(';', end + 1)
        if semicolon == -1:
            logger.warning(f"{strings_path}: missing ';' after key '{keys[-1]}'")
            break
        pos = semicolon + 1

    return keys


def find_source_files(dir_path, extension):
    """Find all source files directly inside dir_path, sorted by name"""
    try:
        names = os.listdir(dir_path)
    except OSError as e:
        raise DirectoryUnreadable(f"Failed to list directory {dir_path}: {e}") from e

    source_files = []
    for name in sorted(names):
        if len(name) > len(extension) and name.endswith(extension):
            path = Path(dir_path) / name
            if path.is_file():
                source_files.append(path)
    return source_files


def extract_usage_key(line, marker_index):
    """Return the quoted literal that ends right before marker_index"""
    closing = marker_index - 1
    if closing < 0 or line[closing] != '"':
        raise MalformedUsageSite("no closing quote before marker")

    opening = line.rfind('"', 0, closing)
    if opening == -1:
        raise MalformedUsageSite("no opening quote before marker")

    return line[opening + 1:closing]


def scan_line(line, marker, filename="<line>", line_number=1):
    """Yield (key, Occurrence) for every marker usage in a single line"""
    index = line.find(marker)
    while index != -1:
        try:
            key = extract_usage_key(line, index)
        except MalformedUsageSite as e:
            logger.warning(f"{filename}:{line_number}: skipping usage, {e}")
        else:
            yield key, Occurrence(filename, line_number)
        index = line.find(marker, index + len(marker))


def scan_file(file_path, marker, usages=None):
    """Record every usage of marker in file_path into usages"""
    if usages is None:
        usages = {}
    filename = Path(file_path).name

    try:
        with open(file_path, 'r', encoding='utf-8', newline='\n') as f:
            for line_number, line in enumerate(f, start=1):
                # Only \n and \r\n end a line, a lone \r stays inside it
                line = line.rstrip('\n')
                if line.endswith('\r'):
                    line = line[:-1]
                for key, occurrence in scan_line(line, marker, filename, line_number):
                    usages.setdefault(key, []).append(occurrence)
    except (OSError, UnicodeDecodeError) as e:
        raise SourceFileUnreadable(f"Error when searching file {filename}: {e}") from e

    return usages


def scan_directory(dir_path, extension, marker, skip_unreadable=False):
    """Build the usage map for every matching source file in dir_path"""
    usages = {}
    for path in find_source_files(dir_path, extension):
        logger.info(f"Scanning {path.name}")
        # Scan into a local map so a failed file leaves no partial usages
        file_usages = {}
        try:
            scan_file(path, marker, file_usages)
        except SourceFileUnreadable as e:
            if not skip_unreadable:
                raise
            logger.warning(f"{e}, skipping")
            continue
        for key, occurrences in file_usages.items():
            usages.setdefault(key, []).extend(occurrences)
    return usages


def get_unused_strings(declared_keys, usages):
    """Declared keys with no usage, in declared order"""
    return [key for key in declared_keys if key not in usages]


def get_orphan_usages(declared_keys, usages):
    """Used keys that are not declared, sorted"""
    declared = set(declared_keys)
    return sorted(key for key in usages if key not in declared)


def print_unused_strings(declared_keys, unused_strings):
    print(f"Existing strings: {len(declared_keys)}")
    for key in unused_strings:
        print(key)
    print(f"Unused strings: {len(unused_strings)}")


def print_results(declared_keys, usages):
    """Print every used key with its occurrences"""
    for key in sorted(usages):
        occurrences = usages[key]
        print(f"{key}, {len(occurrences)} Occurrences")
        for occ in occurrences:
            print(f"\t{occ.filename}:{occ.line}")
        print()

    print(f"Loc strings used: {len(usages)}, existing: {len(declared_keys)}")


def add_common_arguments(parser):
    parser.add_argument("directory", nargs="?", default=None,
                        help="Project directory (default: current directory)")
    parser.add_argument("--config", type=Path, default=None,
                        help=f"YAML config file (default: <directory>/{CONFIG_FILE_NAME})")
    parser.add_argument("--strings-file", default=None,
                        help="Strings file relative to the directory")
    parser.add_argument("--extension", default=None, help="Source file suffix")
    parser.add_argument("--marker", default=None, help="Localization marker token")
    parser.add_argument("--skip-unreadable", action=argparse.BooleanOptionalAction,
                        default=None,
                        help="Warn about and skip unreadable source files")


def resolve_run(args):
    """Return (directory, config) for parsed command line arguments"""
    directory = Path(args.directory) if args.directory else Path.cwd()
    config = load_config(directory, args.config, {
        "strings_file": args.strings_file,
        "extension": args.extension,
        "marker": args.marker,
        "skip_unreadable": args.skip_unreadable,
    })
    return directory, config


def collect(directory, config):
    """Load declared keys and scan for usages"""
    declared_keys = load_declared_keys(directory / config["strings_file"])
    usages = scan_directory(directory, config["extension"], config["marker"],
                            skip_unreadable=config["skip_unreadable"])
    return declared_keys, usages


def setup_logging(verbose=False):
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING,
                        format="%(levelname)s: %(message)s")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Find declared localization strings that are never used.")
    add_common_arguments(parser)
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Also list every used key with its occurrences")
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        directory, config = resolve_run(args)
        declared_keys, usages = collect(directory, config)
    except UnusedStringsError as e:
        logger.error(str(e))
        return 1

    print_unused_strings(declared_keys, get_unused_strings(declared_keys, usages))

    if args.verbose:
        print()
        print_results(declared_keys, usages)

    return 0


if __name__ == "__main__":
    sys.exit(main())
