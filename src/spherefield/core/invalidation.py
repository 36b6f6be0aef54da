"""Change flags polled once per tick to invalidate the accumulated image."""


class ChangeFlag:
    """A boolean "changed since last check" signal.

    Example:
        >>> flag = ChangeFlag()
        >>> flag.mark()
        >>> flag.consume(), flag.consume()
        (True, False)
    """

    def __init__(self, name: str = "change", changed: bool = False) -> None:
        self.name = name
        self._changed = changed

    @property
    def is_set(self) -> bool:
        """Whether a change is pending, without clearing it."""
        return self._changed

    def mark(self) -> None:
        """Record a change."""
        self._changed = True

    def consume(self) -> bool:
        """Return whether a change is pending and clear it."""
        changed = self._changed
        self._changed = False
        return changed

    def __repr__(self) -> str:
        return f"ChangeFlag({self.name!r}, changed={self._changed})"
