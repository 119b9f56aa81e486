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
Concurrent execution of blocking cache calls.
"""

from concurrent.futures import ThreadPoolExecutor

MAX_MAP_ASYNC_THREADS = 20


def imap(func, *args, max_workers=MAX_MAP_ASYNC_THREADS):
    """
    Call `func` with the items of `args` in worker threads and return the
    results in the order of the arguments. The first exception of `func`
    is re-raised in the calling thread.

    >>> imap(lambda x, y: x + y, [1, 2, 3], [10, 20, 30])
    [11, 22, 33]
    """
    calls = list(zip(*args))
    if len(calls) < 2 or max_workers < 2:
        return [func(*call) for call in calls]

    workers = min(len(calls), max_workers)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='tilestore') as executor:
        return list(executor.map(lambda call: func(*call), calls))


def map_tiles(method, tiles, timeout=None):
    """
    Call the cache `method` (``load_tile`` or ``store_tile``) for all
    `tiles`. Returns ``True`` if all calls succeeded.
    """
    return all(imap(lambda tile: method(tile, timeout=timeout), tiles))
