"""
REST client over httpx: builds the URL and headers of a call, encodes the
body, sends it, decodes the response and raises HTTPError on failure.

Subclass RestClient to inject per-call headers (resolve_headers) or to
post-process decoded data (transform):

    class MyApi(RestClient):
        def __init__(self, token):
            super().__init__('https://my.api.com/api')
            self.token = token

        async def resolve_headers(self, route, method, params, body, options):
            return {'Authorization': f'Bearer {self.token}'}

    async with MyApi(token) as api:
        categories = await api.get('/categories')
        await api.post('/login', {'user': user, 'password': password})
"""
import asyncio
import inspect
import time
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qs, urlencode, urlsplit

import httpx
import structlog

from .codec import FormData, parse_body, resolve_response
from .config import Config
from .exceptions import ConfigurationError, HTTPError
from .headers import merge_headers

logger = structlog.get_logger(__name__)

DEFAULT_HEADERS = {
    'Accept': 'application/json',
    'Content-Type': 'application/json',
}
DEFAULT_TIMEOUT = 30.0

# fetch_options consumed by AsyncClient.send() rather than build_request()
SEND_OPTIONS = ('auth', 'follow_redirects')


async def _resolve(value):
    if inspect.isawaitable(value):
        return await value
    return value


def _query_value(value):
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (list, tuple)):
        return [_query_value(v) for v in value]
    return value


class RestClient:
    """Base class for REST API clients."""

    def __init__(
        self,
        base_url: str,
        headers: Optional[Mapping[str, str]] = None,
        simulated_delay: int = 0,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None
    ):
        """Create a client for the API rooted at `base_url`.

        Args:
            base_url: Base of every route
            headers: Default headers, merged over Accept/Content-Type JSON defaults
            simulated_delay: Milliseconds to wait after each successful response
            timeout: Transport timeout in seconds, for the client created here
            client: httpx.AsyncClient to send requests with. It is not closed
                    by aclose(); a client created here is.
        """
        if not base_url:
            raise ConfigurationError('missing base_url')

        self._base_url = base_url
        self._headers: Dict[str, Any] = dict(DEFAULT_HEADERS)
        self.update_headers(headers or {})

        self._simulated_delay = int(simulated_delay) if simulated_delay else 0
        if self._simulated_delay < 0:
            raise ConfigurationError(f'simulated_delay must be >= 0, got {simulated_delay}')

        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_config(cls, config: Optional[Config] = None, **overrides) -> 'RestClient':
        """Build a client from the `client` section of a Config.

        Keyword overrides take precedence over the configured values.
        """
        if config is None:
            config = Config()

        client_config = dict(config.client)
        client_config.update(overrides)

        headers = dict(client_config.get('headers') or {})
        user_agent = client_config.get('user_agent')
        if user_agent:
            headers.setdefault('User-Agent', user_agent)

        return cls(
            client_config.get('base_url'),
            headers=headers,
            simulated_delay=client_config.get('simulated_delay', 0),
            timeout=client_config.get('timeout', DEFAULT_TIMEOUT),
            client=client_config.get('client'),
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def headers(self) -> Dict[str, Any]:
        """Copy of the default headers sent with every call."""
        return dict(self._headers)

    @property
    def simulated_delay(self) -> int:
        """Delay in milliseconds applied after each successful call."""
        return self._simulated_delay

    def update_headers(self, headers: Optional[Mapping[str, Any]] = None) -> 'RestClient':
        """Merge `headers` into the default headers and return the client."""
        self._headers = merge_headers(self._headers, headers)
        return self

    def full_route(self, url: str, params: Optional[Mapping[str, Any]] = None) -> str:
        """Join base URL, route and query string.

        None-valued params are dropped and booleans written as true/false.
        """
        query = {k: _query_value(v) for k, v in (params or {}).items() if v is not None}
        full = f"{self._base_url}{url}?{urlencode(query, doseq=True)}"
        return full[:-1] if full.endswith('?') else full

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the underlying httpx client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> 'RestClient':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def _simulate_delay(self) -> None:
        logger.debug("simulated_delay", delay_ms=self._simulated_delay)
        await asyncio.sleep(self._simulated_delay / 1000)

    def _body_kwargs(self, body: Any, headers: Dict[str, Any]) -> Dict[str, Any]:
        """Map an encoded body onto httpx request arguments."""
        if not body:
            return {}

        if isinstance(body, FormData):
            # httpx writes its own multipart Content-Type with the boundary
            for key in [k for k in headers if str(k).lower() == 'content-type']:
                del headers[key]
            return {'files': body.to_files()}

        if isinstance(body, Mapping):
            return {'data': dict(body)}

        if isinstance(body, (str, bytes)):
            return {'content': body}
        if isinstance(body, bytearray):
            return {'content': bytes(body)}
        if hasattr(body, '__aiter__'):
            return {'content': body}
        # AsyncClient can't stream a sync file object
        if hasattr(body, 'read'):
            return {'content': body.read()}

        return {'content': str(body)}

    async def _fetch(
        self,
        route: str,
        method: str = 'GET',
        params: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Any:
        """Perform one request.

        Args:
            route: Route relative to the base URL
            method: HTTP method
            params: Query string params
            body: Request body, encoded from the Content-Type header
            options: Call options
                headers: Extra headers for this call
                force_type: Decode the response as this content type
                resolve_streams: Read binary responses into bytes instead of
                                 returning the open response
                fetch_options: Raw httpx request arguments, applied last

        Returns:
            Decoded response body after transform()

        Raises:
            ConfigurationError: empty route
            HTTPError: non-2xx response
        """
        if not route:
            raise ConfigurationError('Route is not defined')

        params = params or {}
        options = options or {}
        url = self.full_route(route, params)

        headers = merge_headers(
            self._headers,
            options.get('headers'),
            await _resolve(self.resolve_headers(route, method, params, body, options)),
        )

        wire_body = parse_body(body, headers)

        request_kwargs: Dict[str, Any] = {'method': method, 'url': url}
        request_kwargs.update(self._body_kwargs(wire_body, headers))
        request_kwargs['headers'] = headers
        request_kwargs.update(options.get('fetch_options') or {})

        send_kwargs = {k: request_kwargs.pop(k) for k in SEND_OPTIONS if k in request_kwargs}

        client = self._get_client()
        request = client.build_request(**request_kwargs)

        logger.debug("request_sent", method=request.method, url=str(request.url))
        start_time = time.time()

        try:
            response = await client.send(request, stream=True, **send_kwargs)
        except httpx.TransportError as e:
            logger.warning("transport_error",
                           method=request.method,
                           url=str(request.url),
                           error=str(e))
            raise

        try:
            data = await resolve_response(
                response,
                options.get('force_type') or None,
                options.get('resolve_streams') or False,
            )
        except Exception:
            await response.aclose()
            raise

        logger.debug("response_received",
                     method=request.method,
                     url=str(request.url),
                     status_code=response.status_code,
                     fetch_time=time.time() - start_time)

        if not response.is_success:
            if data is response:
                data = await response.aread()
            logger.warning("http_error",
                           method=request.method,
                           url=str(request.url),
                           status_code=response.status_code)
            raise HTTPError(response.status_code, response.reason_phrase, data)

        if self._simulated_delay:
            await self._simulate_delay()

        return await _resolve(self.transform(data))

    async def resolve_headers(
        self,
        route: str,
        method: str,
        params: Mapping[str, Any],
        body: Any,
        options: Mapping[str, Any]
    ) -> Mapping[str, Any]:
        """Headers added to a single call, e.g. auth tokens. Override in subclasses."""
        return {}

    async def transform(self, data: Any) -> Any:
        """Post-process decoded data before it is returned. Override in subclasses."""
        return data

    async def _fetch_with_body(self, method: str, route: str, body: Any,
                               options: Optional[Dict[str, Any]]) -> Any:
        options = dict(options or {})
        query = options.pop('query', None) or {}
        return await self._fetch(route, method, query, body, options)

    async def get(self, route: str, query: Optional[Mapping[str, Any]] = None,
                  options: Optional[Dict[str, Any]] = None) -> Any:
        """Do a GET."""
        return await self._fetch(route, 'GET', query, None, options)

    async def post(self, route: str, body: Any = None,
                   options: Optional[Dict[str, Any]] = None) -> Any:
        """Do a POST. `options['query']` becomes the query string."""
        return await self._fetch_with_body('POST', route, body, options)

    async def put(self, route: str, body: Any = None,
                  options: Optional[Dict[str, Any]] = None) -> Any:
        """Do a PUT. `options['query']` becomes the query string."""
        return await self._fetch_with_body('PUT', route, body, options)

    async def patch(self, route: str, body: Any = None,
                    options: Optional[Dict[str, Any]] = None) -> Any:
        """Do a PATCH. `options['query']` becomes the query string."""
        return await self._fetch_with_body('PATCH', route, body, options)

    async def delete(self, route: str, query: Optional[Mapping[str, Any]] = None,
                     options: Optional[Dict[str, Any]] = None) -> Any:
        """Do a DELETE."""
        return await self._fetch(route, 'DELETE', query, None, options)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={self._base_url!r})"


async def simple_fetch(
    url: str,
    method: str = 'GET',
    params: Optional[Mapping[str, Any]] = None,
    body: Any = None,
    options: Optional[Dict[str, Any]] = None,
    client: Optional[httpx.AsyncClient] = None
) -> Any:
    """Do a single request against `url` without keeping a RestClient around.

    A query string already in `url` is merged with `params`, `params` winning.
    Binary responses are always read into bytes since the client does not
    outlive the call.
    """
    parts = urlsplit(url or '')
    if not parts.scheme or not parts.netloc:
        raise ConfigurationError(f'invalid url: {url!r}')

    query: Dict[str, Any] = parse_qs(parts.query, keep_blank_values=True)
    query.update(params or {})

    options = dict(options or {})
    options['resolve_streams'] = True

    async with RestClient(f"{parts.scheme}://{parts.netloc}", client=client) as api:
        return await api._fetch(parts.path or '/', method, query, body, options)
