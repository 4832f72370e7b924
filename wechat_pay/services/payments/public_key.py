import asyncio
import contextlib
import os
from collections.abc import Awaitable, Callable
from pathlib import Path

import aiofiles
import aiofiles.os
from loguru import logger


class PublicKeyCache:
    """
    One-shot cache of the WeChat Pay RSA public key.

    The key is kept in memory and persisted to a file. It is looked up in
    memory, then on disk, and only fetched when neither has it. Concurrent
    first callers wait on the same lock, so the key is fetched once.
    The key is never expired; clear() forces the next call to fetch again.
    """

    def __init__(self, path: Path, fetch: Callable[[], Awaitable[str]]) -> None:
        self.path = path
        self._fetch = fetch
        self._public_key: str | None = None
        self._lock = asyncio.Lock()

    async def get(self) -> str:
        """
        Get the public key, loading or fetching it on first use.

        Returns:
            str: PEM encoded public key

        Raises:
            Any exception raised by the fetch callable, nothing is cached then
        """
        if self._public_key is not None:
            return self._public_key

        async with self._lock:
            if self._public_key is None:
                public_key = await self._load()
                if public_key is None:
                    public_key = await self._fetch_and_store()

                self._public_key = public_key

        return self._public_key

    async def clear(self) -> None:
        """
        Drop the cached key from memory and disk.
        """
        async with self._lock:
            self._public_key = None
            await self._remove(self.path)

        logger.info(f"WeChat Pay public key cache cleared: {self.path}")

    async def _load(self) -> str | None:
        if not await aiofiles.os.path.isfile(self.path):
            return None

        async with aiofiles.open(self.path, "rb") as file:
            public_key = (await file.read()).decode("utf-8")

        logger.debug(f"WeChat Pay public key loaded from {self.path}")
        return public_key

    async def _fetch_and_store(self) -> str:
        logger.info("WeChat Pay public key not cached, fetching")
        public_key = await self._fetch()
        await self._store(public_key)

        return public_key

    async def _store(self, public_key: str) -> None:
        tmp_path = self.path.with_name(f"{self.path.name}.{os.getpid()}.tmp")
        await aiofiles.os.makedirs(self.path.parent, exist_ok=True)

        try:
            async with aiofiles.open(tmp_path, "wb") as file:
                await file.write(public_key.encode("utf-8"))

            await aiofiles.os.replace(tmp_path, self.path)
        except OSError:
            logger.exception(f"Failed to persist WeChat Pay public key to {self.path}")
            await self._remove(tmp_path)
            raise

        logger.info(f"WeChat Pay public key persisted to {self.path}")

    @staticmethod
    async def _remove(path: Path) -> None:
        with contextlib.suppress(FileNotFoundError):
            await aiofiles.os.remove(path)
