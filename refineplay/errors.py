"""Error taxonomy for refinement playback."""


class RefineplayError(Exception):
    """Base class for all refineplay errors."""


class UnknownProblem(RefineplayError, KeyError):
    """A problem key that is not in the catalog."""

    def __init__(self, key: str | None) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        if self.key is None:
            return "No problem selected"
        return f"Unknown problem: {self.key!r}"


class InvalidPass(RefineplayError, ValueError):
    """A missing pass or a pass index outside its problem's sequence."""


class PlaybackAborted(RefineplayError):
    """Playback stopped because a presentation callback raised.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, message: str, pass_index: int | None = None) -> None:
        super().__init__(message)
        self.pass_index = pass_index
