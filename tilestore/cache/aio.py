# This file is part of the TileStore project.
# Copyright (C) 2026 The TileStore Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
asyncio interface for tile caches.

Database drivers block, so every call runs in a thread pool executor.
"""

import asyncio
import functools
from concurrent.futures import ThreadPoolExecutor

from tilestore.util.async_ import MAX_MAP_ASYNC_THREADS


class AsyncTileCache(object):
    """
    Wraps a `TileCacheBase` for use in coroutines.

    >>> cache = AsyncTileCache(SQLTileCache('sqlite:///tiles.db', ImageSource))  # doctest: +SKIP
    >>> await cache.put_image_to_cache(data, 2, (100, 200), 10)  # doctest: +SKIP
    True
    """
    def __init__(self, cache, executor=None, max_workers=MAX_MAP_ASYNC_THREADS):
        self.cache = cache
        self._own_executor = executor is None
        if executor is None:
            executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='tilestore')
        self.executor = executor

    async def _run(self, func, *args, **kw):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, functools.partial(func, *args, **kw))

    async def initialize(self):
        return await self._run(self.cache.initialize)

    async def get_image_from_cache(self, type, pos, zoom, timeout=None):
        return await self._run(self.cache.get_image_from_cache, type, pos, zoom, timeout=timeout)

    async def put_image_to_cache(self, tile, type, pos, zoom, timeout=None):
        return await self._run(self.cache.put_image_to_cache, tile, type, pos, zoom, timeout=timeout)

    async def get_images(self, keys, timeout=None):
        return await asyncio.gather(*[
            self.get_image_from_cache(key.type, (key.x, key.y), key.zoom, timeout=timeout)
            for key in keys
        ])

    async def close(self):
        await self._run(self.cache.close)
        if self._own_executor:
            self.executor.shutdown(wait=False)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        await self.close()
