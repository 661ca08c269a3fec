"""
Фоновый сброс просроченных состояний awaiting_prompt.

ExpirationSweeper выполняет один проход, SweepScheduler запускает проходы
с фиксированным интервалом в asyncio задаче.
"""
import asyncio
import logging
from datetime import datetime
from typing import Optional

from app.repositories.session_repository import ChatSessionRepository
from app.services.state_machine import ChatStateMachine

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL_SECONDS = 30.0


class ExpirationSweeper:
    def __init__(self, sessions: ChatSessionRepository, state_machine: ChatStateMachine):
        self.sessions = sessions
        self.state_machine = state_machine

    async def sweep(self, now: Optional[datetime] = None) -> int:
        """
        Один проход: все чаты с истекшим сроком ввода переводятся в idle.
        Ошибка по одному чату не прерывает обработку остальных.

        Returns:
            Количество чатов, сброшенных этим проходом
        """
        expired = await self.sessions.find_expired(now)
        if not expired:
            return 0

        logger.info(f"[SWEEPER] найдено просроченных сессий: {len(expired)}")
        reset_count = 0
        for session in expired:
            try:
                if await self.state_machine.expire_if_due(session.chat_id, session.bot_token, now):
                    reset_count += 1
            except Exception:
                logger.exception(f"[SWEEPER] ошибка сброса состояния чата {session.chat_id}")

        logger.info(f"[SWEEPER] сброшено сессий: {reset_count}")
        return reset_count


class SweepScheduler:
    def __init__(self, sweeper: ExpirationSweeper, interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS):
        self.sweeper = sweeper
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self._stopping = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Запускает периодическую проверку; повторный вызов ничего не делает"""
        if self.is_running:
            logger.info("[SWEEPER] планировщик уже запущен")
            return
        self._stopping = asyncio.Event()
        self._task = asyncio.create_task(self._run(self._stopping), name="expiration-sweeper")
        logger.info(f"[SWEEPER] планировщик запущен, интервал {self.interval_seconds} с")

    async def stop(self) -> None:
        """
        Останавливает планировщик; после возврата новых проходов не будет.
        Текущий проход не прерывается: сброс состояния и уведомление выполняются вместе.
        """
        task, self._task = self._task, None
        if task is None:
            return
        self._stopping.set()
        await task
        logger.info("[SWEEPER] планировщик остановлен")

    async def _run(self, stopping: asyncio.Event) -> None:
        while not stopping.is_set():
            try:
                await asyncio.wait_for(stopping.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass
            if stopping.is_set():
                break
            try:
                await self.sweeper.sweep()
            except Exception:
                logger.exception("[SWEEPER] ошибка прохода, следующий по расписанию")
