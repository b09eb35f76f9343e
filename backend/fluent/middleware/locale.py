"""Locale, domain and frontend resolution for incoming requests."""

import logging
import os
from collections.abc import Mapping

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from backend.fluent.config import Settings, get_settings
from backend.fluent.db.domains import DomainRepository
from backend.fluent.state import STATE_ATTRIBUTE, FluentState, use_state
from backend.fluent.utils.metrics import record_resolution

logger = logging.getLogger(__name__)

_FALSE_FLAGS = {"", "0", "false", "no", "off"}


def env_flag(value: str | None) -> bool:
    """Interpret an environment variable as a boolean flag.

    Unset, empty, ``0``, ``false``, ``no`` and ``off`` (any case) all count as
    off. Operators may write ``false`` to disable the override, where a
    plain non-empty check would treat it as on.
    """
    if value is None:
        return False
    return value.strip().lower() not in _FALSE_FLAGS


def normalize_prefix(path: str) -> str:
    """Strip a leading slash and ensure exactly one trailing slash."""
    return path.lstrip("/").rstrip("/") + "/"


class RequestLocaleResolver:
    """Resolve the FluentState for a request.

    Resolution never fails: missing or malformed inputs degrade to an empty
    locale, a frontend request and domain mode off.
    """

    def __init__(
        self,
        settings: Settings,
        domains: DomainRepository,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize resolver.

        Args:
            settings: Routing configuration
            domains: Domain mapping lookups
            environ: Environment to read the force-domain flag from
                (defaults to the live process environment)
        """
        self._settings = settings
        self._domains = domains
        self._environ = environ if environ is not None else os.environ

    def resolve(self, request: Request) -> FluentState:
        """Build the state for ``request``."""
        state = FluentState(
            locale=self.get_request_locale(request),
            domain=self.get_domain(request),
            is_frontend=self.get_is_frontend(request),
            is_domain_mode=self.get_is_domain_mode(request),
        )
        logger.debug(
            f"Resolved fluent state: locale={state.locale!r} domain={state.domain!r} "
            f"frontend={state.is_frontend} domain_mode={state.is_domain_mode}"
        )
        return state

    def get_request_locale(self, request: Request) -> str:
        """Locale from the configured query parameter, or empty string."""
        if not self._settings.query_param:
            return ""
        return request.query_params.get(self._settings.query_param) or ""

    def get_domain(self, request: Request) -> str:
        """Host of the request as reported by the request (port included)."""
        return request.url.netloc

    def admin_paths(self) -> list[str]:
        """Administrative path prefixes, each ending with ``/``."""
        paths = [*self._settings.admin_url_paths, self._settings.admin_url_base]
        return [normalize_prefix(path) for path in paths if path.strip("/")]

    def get_is_frontend(self, request: Request) -> bool:
        """False if the request path falls under an administrative prefix."""
        current_path = request.url.path.lstrip("/").rstrip("/") + "/"
        return not any(current_path.startswith(prefix) for prefix in self.admin_paths())

    def get_is_domain_mode(self, request: Request) -> bool:
        """Whether locale selection is driven by the request domain."""
        # Never domain mode without any configured domains
        if not self._domains.exists():
            return False

        if env_flag(self._environ.get(self._settings.force_domain_env_var)):
            return True

        if self._settings.force_domain:
            return True

        return self._domains.matches(self.get_domain(request))


class InitStateMiddleware:
    """ASGI middleware that resolves the FluentState once per HTTP request.

    The state is attached to ``request.state`` and made current for the
    downstream application; other scope types pass through untouched.
    """

    def __init__(
        self,
        app: ASGIApp,
        domains: DomainRepository,
        settings: Settings | None = None,
    ) -> None:
        self.app = app
        self.resolver = RequestLocaleResolver(settings or get_settings(), domains)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        # Domain lookups may hit the database on a cache miss
        state = await run_in_threadpool(self.resolver.resolve, request)
        setattr(request.state, STATE_ATTRIBUTE, state)
        record_resolution(state.is_frontend, state.is_domain_mode)

        with use_state(state):
            await self.app(scope, receive, send)
