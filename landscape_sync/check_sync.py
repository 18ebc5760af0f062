#!/usr/bin/env python3
"""
Check that DevStats projects.yaml and the CNCF landscape.yml agree on project names,
main repos, join/incubating/graduated dates and maturity levels.

Every disagreement is printed as an "error:" line; when any is found the report is
e-mailed to EMAIL_TO (unless SKIP_EMAIL is set) and the exit code is 1.
"""
import argparse
import os
import sys
import time
from typing import List, Optional

from dotenv import load_dotenv

from landscape_sync.exemptions import Exemptions, load_exemptions
from landscape_sync.indexer import build_landscape_index, build_registry_index
from landscape_sync.names import Canonicalizer
from landscape_sync.notify import parse_recipients, send_status_email
from landscape_sync.reconcile import Reconciler
from landscape_sync.report import Report, build_report
from landscape_sync.sources import (
    RAW_LANDSCAPE_URL,
    RAW_PROJECTS_URL,
    Source,
    SourceError,
    load_landscape,
    load_registry,
    parse_source,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Report differences between DevStats projects.yaml and landscape.yml")
    parser.add_argument(
        "-l", "--landscape",
        default=os.getenv("LANDSCAPE_YAML_PATH") or RAW_LANDSCAPE_URL,
        help="landscape.yml URL or local path (env LANDSCAPE_YAML_PATH)",
    )
    parser.add_argument(
        "-r", "--registry",
        default=os.getenv("PROJECTS_YAML_PATH") or RAW_PROJECTS_URL,
        help="DevStats projects.yaml URL or local path (env PROJECTS_YAML_PATH)",
    )
    parser.add_argument(
        "-x", "--exemptions",
        default=os.getenv("EXEMPTIONS_YAML_PATH") or None,
        help="YAML file with accepted differences (env EXEMPTIONS_YAML_PATH, defaults to the packaged list)",
    )
    parser.add_argument(
        "--email-to",
        default=os.getenv("EMAIL_TO", ""),
        help="comma separated report recipients (env EMAIL_TO)",
    )
    parser.add_argument(
        "--skip-email",
        action="store_true",
        default=bool(os.getenv("SKIP_EMAIL")),
        help="never send the report (env SKIP_EMAIL)",
    )
    return parser


def check_sync(landscape_source: Source, registry_source: Source, exemptions: Exemptions) -> Report:
    """Fetch both catalogs and reconcile them. Raises SourceError before any check runs."""
    print(f"[INFO] Reading registry from {registry_source}")
    registry_doc = load_registry(registry_source)
    print(f"[INFO] Reading landscape from {landscape_source}")
    landscape_doc = load_landscape(landscape_source)

    canonicalizer = Canonicalizer(exemptions.renames)
    registry = build_registry_index(registry_doc, canonicalizer, exemptions)
    landscape = build_landscape_index(landscape_doc, canonicalizer)
    print(
        f"[INFO] Indexed {len(registry)} registry projects ({len(registry.disabled)} disabled names) "
        f"and {len(landscape)} matching landscape projects"
    )
    result = Reconciler(exemptions).reconcile(registry, landscape)
    return build_report(result)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    started = time.time()
    recipients = parse_recipients(args.email_to)
    try:
        exemptions = load_exemptions(args.exemptions)
        landscape_source = parse_source(args.landscape)
        registry_source = parse_source(args.registry)
    except (OSError, ValueError) as err:
        print(f"Error: invalid configuration: {err}", file=sys.stderr)
        return 1

    try:
        report = check_sync(landscape_source, registry_source, exemptions)
    except SourceError as err:
        message = f"error: {err}\n"
        print(message, end="", file=sys.stderr)
        if not args.skip_email:
            send_status_email(message, recipients)
        print(f"time: {time.time() - started:.2f}s")
        return 1

    print(report.text, end="")
    if report.drift_detected and not args.skip_email:
        send_status_email(report.text, recipients)
    elif not report.drift_detected:
        print("[INFO] landscape.yml and projects.yaml are in sync")
    print(f"time: {time.time() - started:.2f}s")
    return 1 if report.drift_detected else 0


if __name__ == "__main__":
    sys.exit(main())
