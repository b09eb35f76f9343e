"""Request-scoped Fluent state.

The resolved state travels with the request (``request.state.fluent``) and
through a ``ContextVar`` for code that has no access to the request object.
Neither is process global, so concurrent requests never observe each other's
locale or domain.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass
from typing import Any

from starlette.requests import Request

STATE_ATTRIBUTE = "fluent"


@dataclass(frozen=True)
class FluentState:
    """Locale and domain state for a single request.

    An explicit locale (from the query parameter) always takes precedence.
    Consumers may fall back to a domain-derived locale only when ``locale``
    is empty.
    """

    locale: str = ""
    domain: str = ""
    is_frontend: bool = True
    is_domain_mode: bool = False

    @property
    def has_locale(self) -> bool:
        """Whether an explicit locale was resolved for this request."""
        return self.locale != ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


_current_state: ContextVar[FluentState | None] = ContextVar("fluent_state", default=None)


def current_state() -> FluentState:
    """Get the state of the request being handled in this context.

    Returns:
        The active FluentState, or an empty default outside of a request
    """
    state = _current_state.get()
    if state is None:
        return FluentState()
    return state


@contextmanager
def use_state(state: FluentState) -> Iterator[FluentState]:
    """Make ``state`` the current state until the block exits."""
    token = _current_state.set(state)
    try:
        yield state
    finally:
        _current_state.reset(token)


def get_fluent_state(request: Request) -> FluentState:
    """FastAPI dependency returning the state attached by the middleware."""
    state = getattr(request.state, STATE_ATTRIBUTE, None)
    if isinstance(state, FluentState):
        return state
    return current_state()
