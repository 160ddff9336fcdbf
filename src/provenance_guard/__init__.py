"""provenance-guard core package.

Detects npm dependency versions introduced by a lockfile change that lost the
provenance attestation or trusted publisher status earlier versions had. The
check is callable from the GitHub Action wrapper and from the command line.
"""

__all__ = [
    "cli",
    "config",
    "core",
    "detector",
    "diff",
    "parsers",
    "registry",
]
