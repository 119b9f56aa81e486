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

from collections import namedtuple


def _as_int(value):
    # int() would silently truncate 2.7 to 2
    if isinstance(value, float) and not value.is_integer():
        raise ValueError('tile coordinate %r is not an integer' % (value, ))
    return int(value)


class TileKey(namedtuple('TileKey', 'type zoom x y')):
    """
    Composite key of a cached tile: tile type (provider id), zoom level
    and the grid position.

    >>> TileKey(2, 10, 100, 200)
    TileKey(type=2, zoom=10, x=100, y=200)
    """
    __slots__ = ()

    @classmethod
    def from_position(cls, type, pos, zoom):
        """
        Create a key from a tile type, a position and a zoom level.
        `pos` is either an ``(x, y)`` pair or an object with ``x`` and ``y``
        attributes.

        >>> TileKey.from_position(2, (100, 200), 10)
        TileKey(type=2, zoom=10, x=100, y=200)
        >>> TileKey.from_position('2', (100, '200'), 10)
        TileKey(type=2, zoom=10, x=100, y=200)
        >>> TileKey.from_position(2, (100.0, 200), 10)
        TileKey(type=2, zoom=10, x=100, y=200)
        >>> TileKey.from_position(2, (2.7, 200), 10)
        Traceback (most recent call last):
        ...
        ValueError: tile coordinate 2.7 is not an integer
        """
        if hasattr(pos, 'x') and hasattr(pos, 'y'):
            x, y = pos.x, pos.y
        else:
            x, y = pos
        return cls(_as_int(type), _as_int(zoom), _as_int(x), _as_int(y))

    def params(self, **extra):
        """
        Return the key as named query parameters.

        >>> sorted(TileKey(2, 10, 100, 200).params().items())
        [('type', 2), ('x', 100), ('y', 200), ('zoom', 10)]
        """
        params = {'x': self.x, 'y': self.y, 'zoom': self.zoom, 'type': self.type}
        params.update(extra)
        return params


class Tile(object):
    """
    Internal data object for all tiles. Stores the tile ``key``, the raw
    tile ``data`` and the decoded ``source``.

    :ivar data: the stored bytes of this tile
    :ivar source: the result of the cache decoder for ``data``
    """
    def __init__(self, key, data=None, source=None):
        self.key = key
        self.data = data
        self.source = source
        self.stored = False

    @property
    def size(self):
        if self.data is None:
            return None
        return len(self.data)

    def is_missing(self):
        """
        Returns ``True`` when the tile has no ``data`` and no ``source``.
        It doesn't check if the tile exists.

        >>> Tile(TileKey(0, 1, 2, 3)).is_missing()
        True
        >>> Tile(TileKey(0, 1, 2, 3), b'foo').is_missing()
        False
        """
        return self.source is None and not self.data

    def __eq__(self, other):
        """
        >>> Tile(TileKey(0, 1, 0, 0)) == Tile(TileKey(0, 1, 0, 0))
        True
        >>> Tile(TileKey(0, 1, 0, 0)) == Tile(TileKey(0, 1, 1, 0))
        False
        >>> Tile(TileKey(0, 1, 0, 0)) == None
        False
        """
        if isinstance(other, Tile):
            return (self.key == other.key and
                    self.data == other.data)
        else:
            return NotImplemented

    def __repr__(self):
        return 'Tile(%r, size=%r)' % (self.key, self.size)
