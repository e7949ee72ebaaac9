"""
gode-check
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations


class GodeCheckError(RuntimeError):
    """Base for every fatal verification error; the CLI prints it and exits 1."""


class ConfigError(GodeCheckError):
    """Raised when environment or CLI configuration values are invalid."""


class InvalidReferenceError(GodeCheckError):
    """Raised when a release URL does not have the release-page shape."""


class TransportError(GodeCheckError):
    """Raised on network failures and non-2xx HTTP responses."""


class ResponseShapeError(GodeCheckError):
    """Raised when an API response is not JSON or lacks an expected field."""


class NoEvidenceError(GodeCheckError):
    """Raised when there is nothing to compare (no artifacts or no release asset)."""


class ScratchError(GodeCheckError):
    """Raised on scratch directory, file write or archive extraction failures."""
