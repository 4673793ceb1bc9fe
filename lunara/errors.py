"""Exception type shared by the whole package."""


class LunaraError(Exception):
    """Raised when a graph, pass or runtime operation cannot be completed."""

    @property
    def message(self) -> str:
        return str(self)