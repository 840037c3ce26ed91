from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

Record = dict[str, Any]
ConnectedCallback = Callable[[], Awaitable[Any]]


@runtime_checkable
class Transport(Protocol):
    """Broker capability used by the coordinator.

    ``publish`` resolves once the client reports the message sent and raises
    ``PublishError`` on refusal or timeout. ``publish_nowait`` only enqueues;
    it raises ``PublishError`` if the client refuses synchronously.
    """

    def connect(self) -> None: ...

    async def publish(self, topic: str, payload: str) -> None: ...

    def publish_nowait(self, topic: str, payload: str) -> None: ...

    def close(self) -> None: ...
