"""Apply orderings for the sync engine."""

from enum import Enum


class ApplyMode(str, Enum):
    """How remote changes and the state file write are ordered.

    - SAFE: upload and delete first, write the state file only once both
      finished without error. A failed run leaves the previous state in
      place, so the next run retries the same changes.
    - FAST: write the state file concurrently with upload and delete. Saves
      a little time, but a failed upload or delete leaves a state file that
      claims changes which never reached the server.
    """

    SAFE = "safe"
    FAST = "fast"

    @property
    def writes_state_concurrently(self) -> bool:
        """Whether the state file is written alongside the remote changes."""
        return self == ApplyMode.FAST

    @classmethod
    def from_string(cls, value: str) -> "ApplyMode":
        """Parse an apply mode name, case-insensitively.

        Raises:
            ValueError: If the name is unknown
        """
        try:
            return cls(value.lower())
        except ValueError:
            valid = ", ".join(mode.value for mode in cls)
            raise ValueError(
                f"Invalid apply mode: {value}. Valid modes: {valid}"
            ) from None
