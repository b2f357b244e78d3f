from fastapi import HTTPException

from castgraph.services.graph import (
    BoundsError,
    DuplicateNode,
    InvalidState,
    NotFound,
    ValidationFailure,
)


def path_name(raw: str) -> str:
    """URL path segments use '_' for spaces: /actors/Morgan_Freeman."""
    return raw.replace("_", " ")


def to_http_error(exc: Exception) -> HTTPException:
    """Map a graph error onto the client error it stands for."""
    if isinstance(exc, NotFound):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, DuplicateNode):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, InvalidState):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, (ValidationFailure, BoundsError)):
        return HTTPException(status_code=400, detail=str(exc))
    return HTTPException(status_code=500, detail=f"Unexpected graph error: {exc}")
