#!/usr/bin/env python3
"""Main entry point for the Ubuntu security notice digest report."""

import argparse
import copy
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO
import yaml

from .enrichment import Enricher
from .fetchers.base import BaseLookup
from .fetchers.ubuntu import (
    DEFAULT_CVE_URL,
    DEFAULT_NOTICE_URL,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    UbuntuSecurityLookup,
)
from .models import Bulletin
from .parser import parse_notices
from .report import FORMATS, ReportError, write_report
from .scoring import DEFAULT_TARGET_RELEASES, filter_bulletins

DEFAULT_CONFIG = {
    "app": {
        "format": "tsv",
    },
    "filters": {
        "target_releases": list(DEFAULT_TARGET_RELEASES),
    },
    "lookup": {
        "cve_url": DEFAULT_CVE_URL,
        "notice_url": DEFAULT_NOTICE_URL,
        "timeout": DEFAULT_TIMEOUT,
        "user_agent": DEFAULT_USER_AGENT,
        "max_workers": 4,
    },
}


class InputError(Exception):
    """Raised when the digest file cannot be read."""


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Configure logging. Stdout carries the report, so logs go to stderr."""
    level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler(sys.stderr)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def merge_config(base: dict, override: dict) -> dict:
    """Recursively overlay override onto a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = None) -> dict:
    """Load configuration from a YAML file over the defaults."""
    if config_path is None:
        return copy.deepcopy(DEFAULT_CONFIG)

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_file, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    return merge_config(DEFAULT_CONFIG, config)


def build_lookup(lookup_config: dict) -> UbuntuSecurityLookup:
    return UbuntuSecurityLookup(
        cve_url=lookup_config.get("cve_url", DEFAULT_CVE_URL),
        notice_url=lookup_config.get("notice_url", DEFAULT_NOTICE_URL),
        timeout=lookup_config.get("timeout", DEFAULT_TIMEOUT),
        user_agent=lookup_config.get("user_agent", DEFAULT_USER_AGENT),
    )


def read_digest(infile: str) -> List[str]:
    """Read the whole digest up front so a read failure happens before any output."""
    try:
        with open(infile, "r", encoding="utf-8") as f:
            return f.read().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"Failed to read security report file {infile}: {e}") from e


def run_once(
    config: dict,
    infile: str,
    fmt: Optional[str] = None,
    lookup: Optional[BaseLookup] = None,
    stream: Optional[TextIO] = None,
) -> List[Bulletin]:
    """Parse, filter, enrich and print one digest file."""
    logger = logging.getLogger(__name__)

    fmt = fmt or config.get("app", {}).get("format", "tsv")
    stream = stream or sys.stdout
    lookup_config = config.get("lookup", {})
    target_releases = config.get("filters", {}).get("target_releases", DEFAULT_TARGET_RELEASES)

    lines = read_digest(infile)
    logger.info(f"Read {len(lines)} lines from {infile}")

    bulletins = parse_notices(lines)
    filtered = filter_bulletins(bulletins, target_releases)

    if lookup is None:
        lookup = build_lookup(lookup_config)
    enricher = Enricher(lookup, max_workers=lookup_config.get("max_workers", 1))
    enriched = enricher.enrich_all(filtered)

    write_report(enriched, fmt, stream)
    return enriched


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Build a filtered, enriched report from an ubuntu-security-announce digest"
    )
    parser.add_argument(
        "--infile",
        "-i",
        required=True,
        help="Path to the plain-text USN digest",
    )
    parser.add_argument(
        "--format",
        "-f",
        choices=FORMATS,
        help="Output format (default: tsv, or app.format from config)",
    )
    parser.add_argument(
        "--config",
        "-c",
        help="Path to config YAML file",
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Number of notices enriched concurrently (overrides lookup.max_workers)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to this file",
    )

    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        logging.error(f"Configuration error: {e}")
        sys.exit(1)
    except (yaml.YAMLError, ValueError) as e:
        logging.error(f"Error loading config: {e}")
        sys.exit(1)

    if args.workers is not None:
        config["lookup"]["max_workers"] = args.workers

    try:
        run_once(config, args.infile, fmt=args.format)
    except InputError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except ReportError as e:
        logging.error(f"Output error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logging.exception(f"Error during execution: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
