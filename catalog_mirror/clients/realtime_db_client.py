"""Firebase Realtime Database streaming client.

Subscribes to a database path through the REST streaming API
(``text/event-stream``) and reports the full value of the path after every
change, like the SDK's ``value`` listener.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

import aiohttp

from catalog_mirror.config.connection import ConnectionConfig

logger = logging.getLogger(__name__)

DEFAULT_APP_NAME = "[DEFAULT]"

ValueCallback = Callable[[Any], None]


class RealtimeDatabaseError(Exception):
    """Transport or permission failure while listening to the database."""

    pass


ErrorCallback = Callable[[RealtimeDatabaseError], None]


@dataclass(frozen=True)
class StreamEvent:
    """A single server-sent event."""

    event: str
    data: str


class EventStreamParser:
    """Incremental parser for ``text/event-stream`` lines."""

    def __init__(self):
        self._event = "message"
        self._data: List[str] = []

    def feed_line(self, line: str) -> Optional[StreamEvent]:
        """Consume one line (without its terminator).

        Returns:
            The completed event when ``line`` is the blank separator line,
            otherwise None.
        """
        if not line:
            if not self._data and self._event == "message":
                return None
            event = StreamEvent(event=self._event, data="\n".join(self._data))
            self._event = "message"
            self._data = []
            return event

        if line.startswith(":"):
            return None  # comment

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if field == "event":
            self._event = value
        elif field == "data":
            self._data.append(value)
        return None


def _split_path(path: str) -> List[str]:
    return [segment for segment in path.split("/") if segment]


def _set_child(node: Any, segments: List[str], value: Any) -> Any:
    """Return a copy of ``node`` with ``value`` stored at ``segments``.

    A None value removes the child. Nodes already handed to listeners are
    never modified in place.
    """
    if not segments:
        return value

    head, rest = segments[0], segments[1:]

    if isinstance(node, list) and head.isdigit():
        index = int(head)
        items = list(node)
        if index < len(items):
            items[index] = _set_child(items[index], rest, value)
            # Deleting the last items shortens the array
            while items and items[-1] is None:
                items.pop()
            return items or None
        if index == len(items) and value is not None:
            items.append(_set_child(None, rest, value))
            return items
        # Sparse index: the remote value is no longer array-shaped
        node = {str(i): item for i, item in enumerate(items)}

    children = dict(node) if isinstance(node, dict) else {}
    child = _set_child(children.get(head), rest, value)
    if child is None:
        children.pop(head, None)
    else:
        children[head] = child
    return children or None


def apply_put(current: Any, path: str, data: Any) -> Any:
    """Apply a ``put`` event: replace the value at ``path``."""
    return _set_child(current, _split_path(path), data)


def apply_patch(current: Any, path: str, data: Any) -> Any:
    """Apply a ``patch`` event: update each child listed in ``data``."""
    if not isinstance(data, dict):
        raise RealtimeDatabaseError(f"patch payload at {path} is not an object")
    base = _split_path(path)
    for child_path, child_value in data.items():
        current = _set_child(current, base + _split_path(child_path), child_value)
    return current


class Subscription:
    """Handle to an active listener; cancel() ends it."""

    def __init__(self, path: str, task: "asyncio.Task[None]"):
        self.path = path
        self._task = task

    @property
    def active(self) -> bool:
        return not self._task.done()

    def cancel(self) -> None:
        """Stop listening. Safe to call more than once."""
        if not self._task.done():
            self._task.cancel()

    async def wait_closed(self) -> None:
        """Wait until the listener task has finished.

        Failures were already reported to the listener and logged.
        """
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.debug(f"Listener for {self.path} ended with an error")


class RealtimeDatabaseClient:
    """Async client for one Realtime Database instance.

    Supports async context manager pattern for proper resource cleanup.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        request_timeout: float = 30.0,
        auth_token: Optional[str] = None,
    ):
        """Initialize the client.

        Args:
            config: Validated connection parameters.
            request_timeout: Seconds allowed to establish the stream. The
                stream itself has no read timeout.
            auth_token: Optional ID token or database secret sent as ``auth``.
        """
        self._config = config
        self._request_timeout = request_timeout
        self._auth_token = auth_token
        self._session: Optional[aiohttp.ClientSession] = None
        self._subscriptions: List[Subscription] = []

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    def url_for(self, path: str) -> str:
        """REST URL of a database path."""
        base = self._config.database_url.rstrip("/")
        return f"{base}/{'/'.join(_split_path(path))}.json"

    async def connect(self) -> None:
        """Open the HTTP session. Idempotent."""
        if self._session is not None:
            return
        timeout = aiohttp.ClientTimeout(
            total=None,
            sock_connect=self._request_timeout,
            sock_read=None,
        )
        self._session = aiohttp.ClientSession(timeout=timeout)

    async def close(self) -> None:
        """Cancel all listeners and close the HTTP session."""
        for subscription in self._subscriptions:
            subscription.cancel()
            await subscription.wait_closed()
        self._subscriptions = []

        if self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "RealtimeDatabaseClient":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Async context manager exit with cleanup."""
        await self.close()
        return False

    async def listen(
        self,
        path: str,
        on_value: ValueCallback,
        on_error: ErrorCallback,
    ) -> Subscription:
        """Start listening to changes of ``path``.

        Args:
            path: Database path, e.g. ``syncedData/products``.
            on_value: Called with the full value of the path after each
                change (None when the path holds no data).
            on_error: Called once if the stream fails; the listener then ends.

        Returns:
            Subscription handle.
        """
        await self.connect()
        task = asyncio.create_task(self._stream(path, on_value, on_error))
        task.add_done_callback(_log_listener_failure)
        subscription = Subscription(path, task)
        self._subscriptions.append(subscription)
        return subscription

    async def _stream(
        self,
        path: str,
        on_value: ValueCallback,
        on_error: ErrorCallback,
    ) -> None:
        if self._session is None:
            raise RuntimeError("Realtime Database client not connected. Call connect() first.")

        url = self.url_for(path)
        params = {"auth": self._auth_token} if self._auth_token else None
        logger.info(f"Opening event stream for {url}")

        try:
            async with self._session.get(
                url,
                params=params,
                headers={"Accept": "text/event-stream"},
            ) as response:
                if response.status != 200:
                    body = await response.text()
                    raise RealtimeDatabaseError(
                        f"Stream request for {path} failed with HTTP {response.status}: {body[:200]}"
                    )

                parser = EventStreamParser()
                value: Any = None
                async for raw_line in response.content:
                    event = parser.feed_line(raw_line.decode("utf-8").rstrip("\r\n"))
                    if event is not None:
                        value = self._handle_event(event, value, on_value)

            raise RealtimeDatabaseError(f"Event stream for {path} was closed by the server")

        except RealtimeDatabaseError as e:
            logger.error(f"Listener for {path} failed: {e}")
            on_error(e)
        except aiohttp.ClientError as e:
            logger.error(f"Connection error while listening to {path}: {e}")
            on_error(RealtimeDatabaseError(f"Connection error: {e}"))
        except Exception as e:
            logger.exception(f"Unexpected failure while listening to {path}")
            on_error(RealtimeDatabaseError(f"Stream for {path} failed: {e}"))

    def _handle_event(self, event: StreamEvent, value: Any, on_value: ValueCallback) -> Any:
        """Apply one event to the current value and notify when it changed."""
        if event.event == "keep-alive":
            return value

        if event.event == "cancel":
            raise RealtimeDatabaseError(f"Permission denied: {event.data or 'listener cancelled'}")

        if event.event == "auth_revoked":
            raise RealtimeDatabaseError("Credentials expired or were revoked")

        if event.event not in ("put", "patch"):
            logger.debug(f"Ignoring unknown stream event '{event.event}'")
            return value

        try:
            message = json.loads(event.data)
        except json.JSONDecodeError as e:
            raise RealtimeDatabaseError(f"Malformed '{event.event}' event: {e}") from e

        if not isinstance(message, dict) or "path" not in message:
            raise RealtimeDatabaseError(f"Malformed '{event.event}' event: missing path")

        if event.event == "put":
            value = apply_put(value, message["path"], message.get("data"))
        else:
            value = apply_patch(value, message["path"], message.get("data"))

        on_value(value)
        return value


def _log_listener_failure(task: "asyncio.Task[None]") -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Listener task ended with an unexpected error", exc_info=exc)


# App registry: one client per name for the whole process
_apps: dict[str, RealtimeDatabaseClient] = {}


def initialize_app(
    config: ConnectionConfig,
    name: str = DEFAULT_APP_NAME,
    request_timeout: float = 30.0,
    auth_token: Optional[str] = None,
) -> RealtimeDatabaseClient:
    """Create the named client, or return it if already initialized."""
    existing = _apps.get(name)
    if existing is not None:
        logger.debug(f"Realtime Database app '{name}' already initialized")
        return existing

    client = RealtimeDatabaseClient(
        config,
        request_timeout=request_timeout,
        auth_token=auth_token,
    )
    _apps[name] = client
    logger.info(f"Initialized Realtime Database app '{name}' for project {config.project_id}")
    return client


def get_app(name: str = DEFAULT_APP_NAME) -> RealtimeDatabaseClient:
    """Return an initialized client.

    Raises:
        ValueError: If no app with that name was initialized.
    """
    try:
        return _apps[name]
    except KeyError:
        raise ValueError(f"Realtime Database app '{name}' does not exist") from None


def apps() -> List[RealtimeDatabaseClient]:
    """All initialized clients."""
    return list(_apps.values())


async def delete_app(name: str = DEFAULT_APP_NAME) -> None:
    """Close and forget a named client."""
    client = _apps.pop(name, None)
    if client is not None:
        await client.close()
