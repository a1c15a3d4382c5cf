import asyncio

from loguru import logger


class CancellationToken:
    """Explicit stop signal handed to a check.

    Once cancelled it stays cancelled; the first reason wins.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str = "cancellation requested") -> None:
        if self._event.is_set():
            return
        self._reason = reason
        logger.info("Check cancelled: {}", reason)
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()
