"""Flyover error kinds: every failure is terminal for the whole run.

There is no local recovery or retry: a video with missing or inconsistent
frames is worse than no video, so each stage raises and the orchestrator lets
the exception propagate to the caller.
"""


class FlyoverError(RuntimeError):
    """Base class for all flyover failures."""


class InvalidImage(FlyoverError):
    """Source image is missing, unreadable, or has zero area."""


class InvalidConfiguration(FlyoverError):
    """A config value is out of range or non-finite. Raised before scoring."""


class ScoringFailure(FlyoverError):
    """The detail scorer raised or returned a non-finite / out-of-range score."""


class RenderFailure(FlyoverError):
    """The crop/resize collaborator failed on a frame."""


class EncodingFailure(FlyoverError):
    """FFmpeg is missing or exited with an error."""
