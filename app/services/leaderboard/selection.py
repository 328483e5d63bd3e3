class LatestRequestGuard:
    """
    Tracks which selection is current so late results can be dropped.

    Each call to ``begin`` supersedes every earlier ticket. A completion is
    applied only while ``is_current(ticket)`` holds.
    """

    def __init__(self) -> None:
        self._generation = 0
        self._key = None

    @property
    def current_key(self):
        return self._key

    def begin(self, key) -> int:
        self._generation += 1
        self._key = key
        return self._generation

    def is_current(self, ticket: int) -> bool:
        return ticket == self._generation
