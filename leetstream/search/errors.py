"""Failure taxonomy of the resolution pipeline.

None of these reach the caller: each one degrades to fewer (or zero) streams.
"""

from __future__ import annotations


class UnresolvableIdentifier(Exception):
    """No usable search query could be built for an identifier."""


class CollaboratorError(Exception):
    """A metadata or index call failed."""


class CollaboratorTimeout(CollaboratorError):
    """A metadata or index call did not finish within its timeout."""


class MalformedCandidate(ValueError):
    """A search result is missing required fields."""
