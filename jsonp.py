"""
One-shot callback subscriptions for JSONP responses.

The content API wraps its JSON payload in a call to a handler named by the
request. Each request subscribes under a fresh name, the raw script body is
dispatched back through the registry, and the matching subscription's future
receives the payload.
"""
import asyncio
import json
import logging
import re
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, NamedTuple

logger = logging.getLogger(__name__)

# MediaWiki prefixes JSONP bodies with an empty comment.
_JSONP_RE = re.compile(
    r"^\s*(?:/\*\*/)?\s*(?P<name>[A-Za-z_$][\w$]*)\s*\((?P<body>.*)\)\s*;?\s*$",
    re.DOTALL,
)


class Subscription(NamedTuple):
    name: str
    future: "asyncio.Future[Any]"


class CallbackRegistry:
    def __init__(self, prefix: str = "wikiCallback_"):
        self.prefix = prefix
        self._pending: Dict[str, "asyncio.Future[Any]"] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, name: str) -> bool:
        return name in self._pending

    @contextmanager
    def subscribe(self) -> Iterator[Subscription]:
        """Register a handler for the lifetime of the `with` block."""
        name = f"{self.prefix}{uuid.uuid4().hex}"
        future = asyncio.get_running_loop().create_future()
        self._pending[name] = future
        try:
            yield Subscription(name, future)
        finally:
            self._pending.pop(name, None)
            if not future.done():
                future.cancel()

    def dispatch(self, script: str) -> bool:
        """
        Run a JSONP response against the registered handlers.

        Returns True when a pending subscription received the payload and
        False when the named handler is unknown or already resolved.
        Raises ValueError when the script is not a callback invocation.
        """
        match = _JSONP_RE.match(script or "")
        if not match:
            raise ValueError("Response is not a callback invocation")

        payload = json.loads(match.group("body"))
        name = match.group("name")
        future = self._pending.get(name)
        if future is None or future.done():
            logger.warning("Dropping response for unknown callback %s", name)
            return False

        future.set_result(payload)
        return True
