"""Error taxonomy for the actor/movie graph.

Each error also derives from the closest builtin family so callers that only
know about ``LookupError`` / ``ValueError`` / ``IndexError`` still catch it.
"""


class GraphError(Exception):
    """Base class for all graph engine errors."""


class NotFound(GraphError, LookupError):
    """Lookup or delete of a name that is not in the store."""

    def __init__(self, kind, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{getattr(kind, 'value', kind)} not found: {name!r}")

    def __str__(self) -> str:
        return self.args[0]


class InvalidState(GraphError):
    """The graph is not in a state where the requested computation is defined."""


class ValidationFailure(GraphError, ValueError):
    """Malformed external payload (bad numeric field, missing name, ...)."""


class DuplicateNode(ValidationFailure):
    """A node with the same name already exists in its kind."""

    def __init__(self, kind, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{getattr(kind, 'value', kind)} already exists: {name!r}")


class FetchFailure(GraphError):
    """An external page could not be fetched or parsed."""

    def __init__(self, link: str, reason: str = "") -> None:
        self.link = link
        self.reason = reason
        super().__init__(f"could not fetch {link}" + (f": {reason}" if reason else ""))


class BoundsError(GraphError, IndexError):
    """More top-N results were requested than nodes exist."""
