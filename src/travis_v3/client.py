"""TravisClient: one async method per v3 API endpoint.

Every method resolves to a :class:`~travis_v3.result.Result`. Transport
failures, undecodable bodies and the service's own error documents all come
back as ``Failure``; nothing is raised past the client.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, TypeVar

from travis_v3.config import Config
from travis_v3.delivery import OnceDelivery, validate_context
from travis_v3.envelope import Envelope, decode, decode_plain, decode_remote_error
from travis_v3.links import follow_minimal, follow_page
from travis_v3.models import (
    Action,
    Branch,
    Build,
    EnvironmentVariable,
    Job,
    Log,
    MinimalBuild,
    MinimalJob,
    Repository,
    Setting,
)
from travis_v3.request import RequestBuilder, TravisRequest, escape_segment
from travis_v3.result import Failure, Result, Success
from travis_v3.transport import HttpxTransport, wrap_transport_error

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from travis_v3._http import HTTPMethod
    from travis_v3.delivery import DeliveryContext
    from travis_v3.envelope import Page
    from travis_v3.errors import DecodeError, TravisError
    from travis_v3.models import EnvironmentVariableRequest, MinimalResource, Resource
    from travis_v3.queries import BuildQuery, GeneralQuery, QueryConvertible
    from travis_v3.transport import Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")

Repositories = tuple[Repository, ...]
Builds = tuple[Build, ...]


class TravisClient:
    """API client for the Travis CI v3 API.

    Example:
        async with TravisClient(Config(token="...")) as client:
            result = await client.user_repositories()
            if result.ok:
                for repo in result.value:
                    print(repo.slug)
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        transport: Transport | None = None,
        completion_context: DeliveryContext | None = None,
    ) -> None:
        """Create a client.

        Args:
            config: Token and endpoint; resolved from the environment when None.
            transport: Sends requests. Defaults to an httpx-backed transport.
            completion_context: Default context for :meth:`submit` callbacks.
        """
        self.config = config if config is not None else Config()
        self.builder = RequestBuilder(self.config)
        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpxTransport(
            timeout_s=self.config.timeout_s
        )
        if completion_context is not None:
            validate_context(completion_context)
        self._completion_context = completion_context
        self._tasks: set[asyncio.Task[Any]] = set()

    async def __aenter__(self) -> TravisClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if not self._owns_transport:
            return
        aclose = getattr(self._transport, "aclose", None)
        if callable(aclose):
            try:
                await aclose()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                # Cleanup should never mask the primary failure.
                logger.warning("Transport cleanup failed: %s", exc)

    # --- Repositories ---

    async def repositories_for_owner(
        self, owner: str, query: GeneralQuery | None = None
    ) -> Result[Envelope[Repositories], TravisError]:
        """Fetch the repositories of a GitHub user or organization.

        Args:
            owner: GitHub login or owner id.
            query: Paging and sorting options.
        """
        return await self._get(f"/owner/{escape_segment(owner)}/repos", Repositories, query)

    async def user_repositories(
        self, query: GeneralQuery | None = None
    ) -> Result[Envelope[Repositories], TravisError]:
        """Fetch the repositories of the authenticated user."""
        return await self._get("/repos", Repositories, query)

    async def repository(self, repo: str | int) -> Result[Envelope[Repository], TravisError]:
        """Fetch one repository by id or slug (``owner/name``)."""
        return await self._get(f"/repo/{escape_segment(repo)}", Repository)

    async def activate_repository(
        self, repo: str | int
    ) -> Result[Envelope[Repository], TravisError]:
        return await self._post(f"/repo/{escape_segment(repo)}/activate", Repository)

    async def deactivate_repository(
        self, repo: str | int
    ) -> Result[Envelope[Repository], TravisError]:
        return await self._post(f"/repo/{escape_segment(repo)}/deactivate", Repository)

    async def star_repository(self, repo: str | int) -> Result[Envelope[Repository], TravisError]:
        return await self._post(f"/repo/{escape_segment(repo)}/star", Repository)

    async def unstar_repository(
        self, repo: str | int
    ) -> Result[Envelope[Repository], TravisError]:
        return await self._post(f"/repo/{escape_segment(repo)}/unstar", Repository)

    # --- Builds ---

    async def user_active_builds(
        self, query: BuildQuery | None = None
    ) -> Result[Envelope[Builds], TravisError]:
        """Fetch the currently running builds of the authenticated user."""
        return await self._get("/active", Builds, query)

    async def user_builds(
        self, query: BuildQuery | None = None
    ) -> Result[Envelope[Builds], TravisError]:
        return await self._get("/builds", Builds, query)

    async def builds(
        self, repo: str | int, query: BuildQuery | None = None
    ) -> Result[Envelope[Builds], TravisError]:
        """Fetch the builds of one repository."""
        return await self._get(f"/repo/{escape_segment(repo)}/builds", Builds, query)

    async def build(self, build_id: str | int) -> Result[Envelope[Build], TravisError]:
        return await self._get(f"/build/{escape_segment(build_id)}", Build)

    async def restart_build(
        self, build_id: str | int
    ) -> Result[Action[MinimalBuild], TravisError]:
        """Restart a build. The response is an action acknowledgement."""
        request = self.builder.build(f"/build/{escape_segment(build_id)}/restart", method="POST")
        return await self.perform_action(request, Action[MinimalBuild])

    async def cancel_build(
        self, build_id: str | int
    ) -> Result[Action[MinimalBuild], TravisError]:
        request = self.builder.build(f"/build/{escape_segment(build_id)}/cancel", method="POST")
        return await self.perform_action(request, Action[MinimalBuild])

    # --- Jobs ---

    async def jobs_for_build(
        self, build_id: str | int, query: GeneralQuery | None = None
    ) -> Result[Envelope[tuple[Job, ...]], TravisError]:
        return await self._get(f"/build/{escape_segment(build_id)}/jobs", tuple[Job, ...], query)

    async def job(self, job_id: str | int) -> Result[Envelope[Job], TravisError]:
        return await self._get(f"/job/{escape_segment(job_id)}", Job)

    async def restart_job(self, job_id: str | int) -> Result[Action[MinimalJob], TravisError]:
        request = self.builder.build(f"/job/{escape_segment(job_id)}/restart", method="POST")
        return await self.perform_action(request, Action[MinimalJob])

    async def cancel_job(self, job_id: str | int) -> Result[Action[MinimalJob], TravisError]:
        request = self.builder.build(f"/job/{escape_segment(job_id)}/cancel", method="POST")
        return await self.perform_action(request, Action[MinimalJob])

    async def log_for_job(self, job_id: str | int) -> Result[Envelope[Log], TravisError]:
        return await self._get(f"/job/{escape_segment(job_id)}/log", Log)

    # --- Branches ---

    async def branches(
        self, repo: str | int, query: GeneralQuery | None = None
    ) -> Result[Envelope[tuple[Branch, ...]], TravisError]:
        return await self._get(f"/repo/{escape_segment(repo)}/branches", tuple[Branch, ...], query)

    async def branch(self, repo: str | int, name: str) -> Result[Envelope[Branch], TravisError]:
        return await self._get(
            f"/repo/{escape_segment(repo)}/branch/{escape_segment(name)}", Branch
        )

    # --- Environment variables ---

    async def environment_variables(
        self, repo: str | int
    ) -> Result[Envelope[tuple[EnvironmentVariable, ...]], TravisError]:
        return await self._get(
            f"/repo/{escape_segment(repo)}/env_vars", tuple[EnvironmentVariable, ...]
        )

    async def create_environment_variable(
        self, env: EnvironmentVariableRequest, repo: str | int
    ) -> Result[Envelope[EnvironmentVariable], TravisError]:
        return await self._write(
            "POST", f"/repo/{escape_segment(repo)}/env_vars", env, EnvironmentVariable
        )

    async def update_environment_variable(
        self, env: EnvironmentVariableRequest, env_var_id: str, repo: str | int
    ) -> Result[Envelope[EnvironmentVariable], TravisError]:
        path = f"/repo/{escape_segment(repo)}/env_var/{escape_segment(env_var_id)}"
        return await self._write("PATCH", path, env, EnvironmentVariable)

    async def delete_environment_variable(
        self, env_var_id: str, repo: str | int
    ) -> Result[Envelope[EnvironmentVariable], TravisError]:
        path = f"/repo/{escape_segment(repo)}/env_var/{escape_segment(env_var_id)}"
        return await self.perform(self.builder.build(path, method="DELETE"), EnvironmentVariable)

    # --- Settings ---

    async def settings(
        self, repo: str | int
    ) -> Result[Envelope[tuple[Setting, ...]], TravisError]:
        return await self._get(f"/repo/{escape_segment(repo)}/settings", tuple[Setting, ...])

    # --- Links ---

    async def follow(
        self, stub: MinimalResource
    ) -> Result[Envelope[Resource], TravisError] | None:
        """Fetch the full representation of an embedded stub.

        Returns None, not a failure, when the stub carries no ``@href``.
        """
        built = follow_minimal(stub, self.builder)
        if built is None:
            return None
        if isinstance(built, Failure):
            return built
        return await self.perform(built.value, stub.full_model())

    async def follow_page(
        self, page: Page, shape: type[T] | Any
    ) -> Result[Envelope[T], TravisError]:
        """Fetch the collection window *page* links to, decoded as *shape*."""
        built = follow_page(page, self.builder)
        if isinstance(built, Failure):
            return built
        return await self.perform(built.value, shape)

    async def next_page(
        self, envelope: Envelope[T]
    ) -> Result[Envelope[T], TravisError] | None:
        """Fetch the page after *envelope*; None on the last page."""
        if envelope.pagination is None or envelope.pagination.next is None:
            return None
        return await self.follow_page(envelope.pagination.next, envelope.shape)

    # --- Requests ---

    async def perform(
        self, request: TravisRequest, shape: type[T] | Any
    ) -> Result[Envelope[T], TravisError]:
        """Send *request* and decode the enveloped response as *shape*."""
        return await self._send(request, lambda content: decode(content, shape))

    async def perform_action(
        self, request: TravisRequest, shape: type[T] | Any
    ) -> Result[T, TravisError]:
        """Send *request* and decode an unenveloped response as *shape*."""
        return await self._send(request, lambda content: decode_plain(content, shape))

    def submit(
        self,
        operation: Awaitable[Result[Any, Any]],
        completion: Callable[[Result[Any, Any]], object],
        *,
        context: DeliveryContext | None = None,
    ) -> asyncio.Task[Result[Any, Any]]:
        """Run *operation* and deliver its result to *completion* exactly once.

        Must be called from a running event loop. The callback runs on
        *context* (an Executor or event loop), falling back to the client's
        ``completion_context`` and then to the running loop. Cancelling the
        returned task delivers a TransportError failure.

        Example:
            with ThreadPoolExecutor(1) as pool:
                client.submit(client.build(42), on_build, context=pool)
        """
        loop = asyncio.get_running_loop()
        target = context or self._completion_context or loop
        delivery = OnceDelivery(completion, target)
        task = asyncio.ensure_future(operation)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(delivery.from_task)
        return task

    async def _get(
        self,
        path: str,
        shape: type[T] | Any,
        query: QueryConvertible | None = None,
    ) -> Result[Envelope[T], TravisError]:
        items = query.query_items() if query is not None else None
        return await self.perform(self.builder.build(path, query=items), shape)

    async def _post(self, path: str, shape: type[T] | Any) -> Result[Envelope[T], TravisError]:
        return await self.perform(self.builder.build(path, method="POST"), shape)

    async def _write(
        self,
        method: HTTPMethod,
        path: str,
        body: EnvironmentVariableRequest,
        shape: type[T] | Any,
    ) -> Result[Envelope[T], TravisError]:
        request = self.builder.build(path, method=method, body=body.to_body())
        return await self.perform(request, shape)

    async def _send(
        self,
        request: TravisRequest,
        decoder: Callable[[bytes], Result[Any, DecodeError]],
    ) -> Result[Any, TravisError]:
        logger.debug("%s %s", request.method, request.url)
        try:
            response = await self._transport.send(request)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            err = wrap_transport_error(exc, request=request)
            logger.debug("Transport failure for %s %s: %s", request.method, request.path, err)
            return Failure(err)

        decoded = decoder(response.content)
        if isinstance(decoded, Success):
            return decoded

        remote = decode_remote_error(response.content, status_code=response.status_code)
        if remote is not None:
            logger.debug(
                "Service error %s (status=%s) for %s", remote.error_type, response.status_code, request.path
            )
            return Failure(remote)

        logger.debug(
            "Undecodable response (status=%s) for %s: %s",
            response.status_code,
            request.path,
            decoded.error,
        )
        return decoded
