"""Error taxonomy for comparisons and captures."""

from __future__ import annotations


class ParityError(Exception):
    """Base class for every error raised by visual_parity."""


class DimensionError(ParityError):
    """A pixel buffer's byte length or dimensions don't line up.

    Unrecoverable for the call: the caller has to re-capture.
    """


class EmptyInputError(ParityError):
    """Nothing comparable was supplied (no components, no pixels, no records)."""


class ToleranceConfigError(ParityError):
    """A tolerance, weight or threshold is negative or out of range."""


class CaptureError(ParityError):
    """The browser collaborator couldn't produce a capture for a selector."""
