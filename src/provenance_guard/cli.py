"""Command line entrypoint, used by the GitHub Action and for local runs.

Usage:
  provenance-guard [--workspace PATH] [--lockfile NAME] [--base-ref REF]
                   [--fail-on-downgrade POLICY] [--fail-on-provenance-change]
                   [--registry-url URL] [--report PATH] [--verbose]

Options not given on the command line fall back to the action inputs and
runner environment (see ``provenance_guard.config``).
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from .config import ConfigError, FailPolicy, load_settings
from .core import run_check

LOG_FORMAT = "[%(levelname)s] %(message)s"

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="provenance-guard",
        description="Fail when a lockfile change drops npm provenance or trusted publishing.",
    )
    parser.add_argument("--workspace", type=Path, default=None, help="Checkout to inspect")
    parser.add_argument("--lockfile", default=None, help="Lockfile path relative to the workspace")
    parser.add_argument("--base-ref", default=None, help="Git ref holding the previous lockfile")
    parser.add_argument(
        "--fail-on-downgrade",
        default=None,
        help="true/any, only-provenance-loss or false",
    )
    parser.add_argument(
        "--fail-on-provenance-change",
        action="store_true",
        default=None,
        help="Fail when the attested repository or branch changes",
    )
    parser.add_argument("--registry-url", default=None, help="npm registry base URL")
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Write the JSON report to this path",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT
    )

    try:
        settings = load_settings().with_overrides(
            workspace_path=args.workspace,
            lockfile=args.lockfile,
            base_ref=args.base_ref,
            fail_on_downgrade=(
                FailPolicy.parse(args.fail_on_downgrade)
                if args.fail_on_downgrade is not None
                else None
            ),
            fail_on_provenance_change=args.fail_on_provenance_change,
            registry_url=args.registry_url,
        )
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2

    try:
        result = run_check(settings)
    except Exception:
        logger.exception("Provenance check failed")
        return 1

    if args.report is not None and result.report is not None:
        args.report.write_text(json.dumps(result.report, indent=2) + "\n", encoding="utf-8")
    return result.exit_code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
