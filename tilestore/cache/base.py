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

from abc import ABC, abstractmethod
from typing import Optional

from tilestore.cache.tile import Tile, TileKey


class CacheBackendError(Exception):
    pass


class TileCacheBase(ABC):
    """
    Base implementation of a tile cache.

    Subclasses implement the tile based methods (`load_tile`, `store_tile`,
    `is_cached`). The ``*_image_*`` methods are the interface for map
    clients that work with a type, a position and a zoom level.
    """

    @abstractmethod
    def load_tile(self, tile: Tile, timeout=None) -> bool:
        pass

    def load_tiles(self, tiles: list[Tile], timeout=None) -> bool:
        all_succeed = True
        for tile in tiles:
            if not self.load_tile(tile, timeout=timeout):
                all_succeed = False
        return all_succeed

    @abstractmethod
    def store_tile(self, tile: Tile, timeout=None) -> bool:
        pass

    def store_tiles(self, tiles: list[Tile], timeout=None) -> bool:
        all_succeed = True
        for tile in tiles:
            if not self.store_tile(tile, timeout=timeout):
                all_succeed = False
        return all_succeed

    @abstractmethod
    def is_cached(self, tile: Tile, timeout=None) -> bool:
        """
        Return ``True`` if the tile is cached.
        """
        pass

    @abstractmethod
    def delete_older_than(self, date, type: Optional[int] = None) -> int:
        """
        Remove all tiles (of `type`) that were stored before `date`.
        Returns the number of removed tiles.
        """
        pass

    def get_image_from_cache(self, type, pos, zoom, timeout=None):
        """
        Return the decoded tile or ``None`` if the tile is not cached.
        """
        tile = Tile(TileKey.from_position(type, pos, zoom))
        if not self.load_tile(tile, timeout=timeout):
            return None
        return tile.source

    def put_image_to_cache(self, tile, type, pos, zoom, timeout=None) -> bool:
        """
        Store the encoded `tile` bytes. Returns ``False`` if the tile was
        not stored.
        """
        return self.store_tile(Tile(TileKey.from_position(type, pos, zoom), tile), timeout=timeout)

    def get_images(self, keys: list[TileKey], timeout=None) -> list:
        tiles = [Tile(key) for key in keys]
        self.load_tiles(tiles, timeout=timeout)
        return [tile.source for tile in tiles]

    def put_images(self, records, timeout=None) -> bool:
        """
        Store all ``(key, data)`` `records`.
        """
        return self.store_tiles([Tile(key, data) for key, data in records], timeout=timeout)
