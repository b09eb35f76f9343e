"""Diagnostic endpoint exposing the resolved Fluent state."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from backend.fluent.state import FluentState, get_fluent_state

router = APIRouter()


@router.get("/fluent/state")
async def fluent_state(
    state: Annotated[FluentState, Depends(get_fluent_state)],
) -> dict[str, Any]:
    """Return the state resolved for this request."""
    return state.to_dict()
