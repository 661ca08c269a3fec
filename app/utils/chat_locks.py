"""
Per-chat блокировки внутри процесса.

Lock создаётся лениво при первом обращении к чату и удаляется, когда
не остаётся ни владельца, ни ожидающих.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class ChatLockRegistry:
    def __init__(self):
        self._locks: Dict[int, asyncio.Lock] = {}
        self._holders: Dict[int, int] = {}  # chat_id -> владелец + ожидающие

    @asynccontextmanager
    async def hold(self, chat_id: int) -> AsyncIterator[None]:
        lock = self._locks.get(chat_id)
        if lock is None:
            lock = self._locks[chat_id] = asyncio.Lock()
        self._holders[chat_id] = self._holders.get(chat_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._holders[chat_id] - 1
            if remaining:
                self._holders[chat_id] = remaining
            else:
                del self._holders[chat_id]
                del self._locks[chat_id]

    def __len__(self) -> int:
        return len(self._locks)
