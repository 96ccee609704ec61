"""Endpoint fallback sequencing.

For one logical query the sequencer walks candidate endpoints in priority
order and, for each candidate, the transports in order: a direct request
first, then every configured relay. The walk is strictly sequential.

Outcome handling per attempt:

- 401/403 on any transport stops everything and raises ``AuthError``.
- Timeouts, network errors, other non-2xx statuses and undecodable bodies
  move on to the next transport.
- A 2xx is normalized; an empty collection moves on to the next *candidate*
  when the operation's policy says so, otherwise it is the answer.

When every candidate is exhausted, soft operations return an empty list.
The critical operation (results) returns an empty list if at least one
candidate answered with an empty 2xx, and raises ``ResultsUnavailableError``
when no candidate answered at all.
"""

import asyncio
from collections.abc import Iterator, Mapping
from typing import Any, Protocol

import structlog

from teamboard.client import DIRECT, wrap_relay
from teamboard.config import Settings
from teamboard.endpoints import (
    DEFAULT_CANDIDATES,
    DEFAULT_POLICIES,
    Candidate,
    Operation,
    OperationPolicy,
    ordered_candidates,
)
from teamboard.exceptions import (
    AuthError,
    ParseError,
    ResultsUnavailableError,
    TransientTransportError,
)
from teamboard.models import RawRecord
from teamboard.normalizer import unwrap, unwrap_one
from teamboard.transport import TransportConfig, resolve_transport, root_for

logger = structlog.get_logger(__name__)


class JsonClient(Protocol):
    async def get_json(self, url: str, headers: dict[str, str]) -> Any: ...


class EndpointSequencer:
    """Resolves logical queries against the first endpoint that answers.

    Candidate lists, policies and relays are immutable configuration passed in
    at construction.
    """

    def __init__(
        self,
        client: JsonClient,
        settings: Settings | None = None,
        candidates: Mapping[Operation, tuple[Candidate, ...]] | None = None,
        policies: Mapping[Operation, OperationPolicy] | None = None,
    ):
        self.client = client
        self.settings = settings or Settings()
        self.candidates = candidates if candidates is not None else DEFAULT_CANDIDATES
        self.policies = policies if policies is not None else DEFAULT_POLICIES
        self.transports: tuple[str, ...] = (DIRECT, *self.settings.relays)

    def _default_params(self) -> dict[str, object]:
        s = self.settings
        return {
            "games_limit": s.games_limit,
            "tasks_limit": s.tasks_limit,
            "results_limit": s.results_limit,
            "photos_limit": s.photos_limit,
        }

    def _urls(
        self, operation: Operation, transport: TransportConfig, params: dict[str, object]
    ) -> Iterator[str]:
        for candidate in ordered_candidates(
            self.candidates.get(operation, ()), transport.dialect
        ):
            yield candidate.render(root_for(candidate.dialect, self.settings), params)

    async def _attempt(
        self, url: str, headers: dict[str, str], policy: OperationPolicy
    ) -> list[RawRecord] | None:
        """Tries every transport for one candidate URL.

        Returns the normalized records of the first 2xx response, or None when
        no transport produced one.
        """
        for relay in self.transports:
            target = wrap_relay(relay, url)
            via = relay or "direct"
            logger.debug("transport_attempt", url=url, via=via)
            try:
                body = await self.client.get_json(target, headers)
            except AuthError as e:
                logger.error(
                    "transport_auth_failed", url=url, via=via, status_code=e.status_code
                )
                raise
            except (TransientTransportError, ParseError) as e:
                logger.warning(
                    "transport_failed",
                    url=url,
                    via=via,
                    error=e.message,
                    status_code=getattr(e, "status_code", None),
                )
                continue

            records = unwrap_one(body) if policy.single_record else unwrap(body)
            logger.debug("transport_succeeded", url=url, via=via, count=len(records))
            return records
        return None

    async def resolve(
        self, operation: Operation, credential: str, **params: object
    ) -> list[RawRecord]:
        """Returns the records of the first candidate that answers non-empty.

        Args:
            operation: Logical query to resolve.
            credential: Opaque credential string.
            **params: Template parameters (e.g. ``game_id``).

        Returns:
            The normalized records, possibly empty.

        Raises:
            AuthError: On the first 401/403 from any transport.
            ResultsUnavailableError: For critical operations when no candidate
                produced a successful response.
        """
        policy = self.policies.get(operation, OperationPolicy())
        transport = resolve_transport(credential, self.settings)
        headers = transport.headers()
        merged = {**self._default_params(), **params}

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.settings.operation_deadline
        attempts = 0
        answered = False

        for url in self._urls(operation, transport, merged):
            if loop.time() > deadline:
                logger.warning(
                    "operation_deadline_exceeded",
                    operation=operation.value,
                    attempts=attempts,
                )
                break
            attempts += 1
            records = await self._attempt(url, headers, policy)
            if records is None:
                continue
            answered = True
            if records or not policy.advance_on_empty:
                return records
            logger.debug("empty_success", operation=operation.value, url=url)

        if policy.critical and not answered:
            raise ResultsUnavailableError(
                f"No endpoint answered the {operation.value} query",
                game_id=str(params.get("game_id")) if "game_id" in params else None,
                attempts=attempts,
            )
        logger.info("operation_exhausted", operation=operation.value, attempts=attempts)
        return []

    async def collect_all(
        self, operation: Operation, credential: str, **params: object
    ) -> list[list[RawRecord]]:
        """Returns the non-empty record collections of every candidate.

        Used where candidates complement rather than replace each other (the
        photo gallery). Transport fallback and the auth short-circuit apply to
        each candidate exactly as in ``resolve``.
        """
        policy = self.policies.get(operation, OperationPolicy())
        transport = resolve_transport(credential, self.settings)
        headers = transport.headers()
        merged = {**self._default_params(), **params}

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.settings.operation_deadline
        sources: list[list[RawRecord]] = []

        for url in self._urls(operation, transport, merged):
            if loop.time() > deadline:
                logger.warning("operation_deadline_exceeded", operation=operation.value)
                break
            records = await self._attempt(url, headers, policy)
            if records:
                sources.append(records)
        return sources
