"""GraphQL-over-HTTP client for the Hasura data service."""

from typing import Any

import httpx

from todoapp.auth.models import Session
from todoapp.exceptions import ConfigurationError, PersistenceError
from todoapp.graphql.cache import ResponseCache
from todoapp.logging_config import get_logger
from todoapp.settings import Settings, settings

logger = get_logger(__name__)

ADMIN_SECRET_HEADER = "x-hasura-admin-secret"


class GraphQLClient:
    """Client for queries and mutations against the data service.

    Query results are kept in a bounded cache keyed by document and
    variables. Any mutation clears the cache, and ``refresh=True`` skips
    it for a single query.
    """

    def __init__(
        self,
        url: str | None = None,
        admin_secret: str | None = None,
        timeout: float | None = None,
        cache: ResponseCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        config: Settings | None = None,
    ):
        """Initialize GraphQL client.

        Args:
            url: GraphQL endpoint. If not provided, uses config.
            admin_secret: Shared secret header value. If not provided, uses config.
            timeout: Request timeout in seconds. If not provided, uses config
                (where None waits indefinitely).
            cache: Response cache (a new one sized from config by default)
            transport: Optional httpx transport, used by tests
            config: Settings for unset arguments (the global settings by default)
        """
        config = config or settings
        self.url = url or config.graphql_url
        if admin_secret is None and config.graphql_admin_secret is not None:
            admin_secret = config.graphql_admin_secret.get_secret_value()
        self.admin_secret = admin_secret
        self.timeout = timeout if timeout is not None else config.request_timeout
        self.cache = cache if cache is not None else ResponseCache(config.cache_max_entries)
        self.transport = transport
        self.logger = get_logger(__name__)

    def _headers(self, session: Session | None) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if session is not None:
            headers["Authorization"] = f"Bearer {session.token}"
        if self.admin_secret:
            headers[ADMIN_SECRET_HEADER] = self.admin_secret
        return headers

    async def _request(
        self,
        document: str,
        variables: dict[str, Any] | None,
        session: Session | None,
    ) -> dict[str, Any]:
        """Post one operation to the data service.

        Args:
            document: GraphQL query or mutation
            variables: Operation variables
            session: Session whose token is sent as bearer credential

        Returns:
            The ``data`` member of the response

        Raises:
            PersistenceError: On transport failure, HTTP error or GraphQL errors
        """
        if not self.url:
            raise ConfigurationError("GraphQL endpoint is not configured", error_code="not_configured")

        payload = {"query": document, "variables": variables or {}}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(self.url, json=payload, headers=self._headers(session))
            except httpx.TimeoutException:
                raise PersistenceError("Request timeout", error_code="timeout")
            except httpx.RequestError as e:
                raise PersistenceError(f"Request failed: {str(e)}", error_code="request_error")

        if response.status_code >= 400:
            raise PersistenceError(
                f"Data service returned HTTP {response.status_code}",
                status_code=response.status_code,
                error_code="http_error",
            )

        try:
            body = response.json()
        except ValueError:
            raise PersistenceError("Data service returned invalid JSON", error_code="invalid_response")

        if body.get("errors"):
            error = body["errors"][0]
            raise PersistenceError(
                error.get("message", "Unknown error"),
                status_code=response.status_code,
                error_code=(error.get("extensions") or {}).get("code"),
            )

        data = body.get("data")
        if data is None:
            raise PersistenceError("Data service returned no data", error_code="invalid_response")
        return data

    async def query(
        self,
        document: str,
        variables: dict[str, Any] | None = None,
        session: Session | None = None,
        refresh: bool = False,
    ) -> dict[str, Any]:
        """Run a query, answering from the cache when possible.

        Args:
            document: GraphQL query
            variables: Query variables
            session: Current session
            refresh: Skip the cache and store the fresh result

        Returns:
            Response data
        """
        if not refresh:
            cached = self.cache.get(document, variables)
            if cached is not None:
                self.logger.debug("graphql_cache_hit")
                return cached

        try:
            data = await self._request(document, variables, session)
        except PersistenceError as e:
            self.logger.warning("graphql_query_failed", error=e.message, error_code=e.error_code)
            raise

        self.cache.set(document, variables, data)
        return data

    async def mutate(
        self,
        document: str,
        variables: dict[str, Any] | None = None,
        session: Session | None = None,
    ) -> dict[str, Any]:
        """Run a mutation and invalidate cached query results.

        Args:
            document: GraphQL mutation
            variables: Mutation variables
            session: Current session

        Returns:
            Response data
        """
        try:
            data = await self._request(document, variables, session)
        except PersistenceError as e:
            self.logger.warning("graphql_mutation_failed", error=e.message, error_code=e.error_code)
            raise

        self.cache.clear()
        return data
