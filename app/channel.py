from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Generic, TypeVar

T = TypeVar("T")


class ChannelClosed(RuntimeError):
    pass


class Channel(Generic[T]):
    """无界单消费者通道：任意线程都可以 send，recv 只能在所属事件循环里调用"""

    def __init__(self, loop: asyncio.AbstractEventLoop, name: str = "") -> None:
        self.name = name
        self._loop = loop
        self._queue: asyncio.Queue[T] = asyncio.Queue()

    def send(self, item: T) -> None:
        if self._loop.is_closed():
            raise ChannelClosed(f"通道 {self.name or id(self)} 的事件循环已关闭")
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, item)
        except RuntimeError as exc:
            raise ChannelClosed(str(exc)) from exc

    async def recv(self) -> T:
        return await self._queue.get()

    def pending(self) -> int:
        return self._queue.qsize()


async def merge(*channels: Channel) -> AsyncIterator[tuple[Channel, object]]:
    """同时等待多个通道，哪个先有数据就先产出 (channel, item)。

    通道之间没有优先级；每个通道始终挂着一个 recv，已取出的数据不会丢。
    """
    pending: dict[asyncio.Future, Channel] = {
        asyncio.ensure_future(channel.recv()): channel for channel in channels
    }
    try:
        while True:
            done, _ = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            for future in done:
                channel = pending.pop(future)
                item = future.result()
                pending[asyncio.ensure_future(channel.recv())] = channel
                yield channel, item
    finally:
        for future in pending:
            future.cancel()
