"""Awaitable front end that runs gate operations off the event loop."""

from __future__ import annotations

import asyncio
import functools
import weakref
from typing import Any, Callable, Optional

from .gate import BiometricGate


class AsyncBiometricGate:
    """Runs blocking gate calls in an executor, one challenge per feature at a time."""

    def __init__(self, gate: BiometricGate) -> None:
        self.gate = gate
        # Locks are bound to the loop they first wait on; held weakly so
        # released features drop out.
        self._locks: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()

    def _lock_for(self, feature: str) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        locks = self._locks.get(loop)
        if locks is None:
            locks = self._locks[loop] = weakref.WeakValueDictionary()
        lock = locks.get(feature)
        if lock is None:
            lock = locks[feature] = asyncio.Lock()
        return lock

    async def _run(self, func: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args))

    async def is_available(self) -> bool:
        return await self._run(self.gate.is_available)

    async def is_feature_gated(self, feature: str) -> bool:
        return await self._run(self.gate.is_feature_gated, feature)

    async def enable(self, feature: str) -> bool:
        async with self._lock_for(feature):
            return await self._run(self.gate.enable, feature)

    async def disable(self, feature: str, reason: Optional[str] = None) -> bool:
        async with self._lock_for(feature):
            return await self._run(self.gate.disable, feature, reason)

    async def request_authentication(self, feature: str, reason: Optional[str] = None) -> bool:
        async with self._lock_for(feature):
            return await self._run(self.gate.request_authentication, feature, reason)
