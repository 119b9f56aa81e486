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
Tile cache in a relational database table.
"""

import threading

from tilestore.cache.base import TileCacheBase
from tilestore.cache.dialect import check_table_name, database_errors, load_dialect
from tilestore.exception import ConfigurationError, NotSupportedError
from tilestore.util import async_

import logging
log = logging.getLogger(__name__)

DEFAULT_TABLE_NAME = 'GMapNETCache'


class Statement(object):
    """
    A cursor bound to one parameterized SQL statement.
    """
    def __init__(self, cursor, sql):
        self.cursor = cursor
        self.sql = sql

    def execute(self, params):
        self.cursor.execute(self.sql, params)
        return self.cursor

    def close(self):
        self.cursor.close()


class StoreHandle(object):
    """
    Connections and statements of an initialized `SQLTileCache`.
    Reads and writes use separate connections.
    """
    def __init__(self, dialect=None):
        self.dialect = dialect
        self.read_conn = None
        self.write_conn = None
        self.fetch = None
        self.insert = None


class SQLTileCache(TileCacheBase):
    """
    Tile cache in a single database table.

    The cache connects lazily on the first request. All database errors
    are logged and reported as cache misses or failed stores; the cache
    closes its connections afterwards and reconnects on the next request.

    :param connection_string: database URL, e.g. ``sqlite:///tiles.db``
        or ``postgresql://user:pw@host/db``
    :param decoder: callable that converts the stored bytes into the
        returned tile image
    :param table_name: name of the tile table, created if it is missing
    :param timeout: default timeout in seconds for connects and queries
    :param on_error: optional callable that is called with the operation
        name and the exception for each database error
    """

    def __init__(self, connection_string, decoder, table_name=DEFAULT_TABLE_NAME, timeout=30,
                 wal=False, on_error=None):
        if decoder is None:
            raise ConfigurationError("decoder is required")
        self.decoder = decoder
        self.table_name = check_table_name(table_name)
        self.timeout = timeout
        self.wal = wal
        self.on_error = on_error
        self._dialect = load_dialect(connection_string, timeout=timeout, wal=wal)
        self._connection_string = connection_string

        # guards initialize/close, always acquired before a statement lock
        self._lock = threading.RLock()
        self._fetch_lock = threading.Lock()
        self._insert_lock = threading.Lock()

        self._handle = StoreHandle()
        self._initialized = False
        self._errors = database_errors()

    @property
    def connection_string(self):
        return self._connection_string

    @connection_string.setter
    def connection_string(self, value):
        if value == self._connection_string:
            return
        dialect = load_dialect(value, timeout=self.timeout, wal=self.wal)
        with self._lock:
            self._connection_string = value
            self._dialect = dialect
            if not self._initialized:
                return
            self.close()
            self.initialize()

    @property
    def initialized(self):
        with self._lock:
            return self._initialized

    def initialize(self):
        """
        Connect to the database and create the tile table if it does not
        exist. Returns ``True`` if the cache is ready to use.
        """
        if self._initialized:
            return True

        with self._lock:
            if self._initialized:
                return True

            handle = StoreHandle(self._dialect)
            try:
                self._open(handle)
            except Exception as ex:
                self._release(handle)
                self._report('initialize', ex)
                return False

            self._handle = handle
            self._initialized = True
            log.info('initialized %s tile cache table %s', type(handle.dialect).__name__, self.table_name)
            return True

    def _open(self, handle):
        dialect = handle.dialect
        handle.read_conn = dialect.connect(read_only=True)
        handle.write_conn = dialect.connect()

        if not dialect.table_exists(handle.read_conn, self.table_name):
            log.info('creating tile table %s', self.table_name)
            dialect.create_table(handle.write_conn, self.table_name)

        cursor = handle.read_conn.cursor()
        handle.fetch = Statement(cursor, dialect.prepare_fetch(cursor, self.table_name))
        handle.insert = Statement(handle.write_conn.cursor(), dialect.insert_stmt(self.table_name))

    def close(self):
        """
        Close all statements and connections. The next request will
        initialize the cache again.
        """
        with self._lock:
            handle = self._handle
            with self._insert_lock:
                self._close_quietly(handle.insert)
                handle.insert = None
                self._close_quietly(handle.write_conn)
                handle.write_conn = None

            with self._fetch_lock:
                self._close_quietly(handle.fetch)
                handle.fetch = None
                self._close_quietly(handle.read_conn)
                handle.read_conn = None

            self._initialized = False

    cleanup = close

    def _release(self, handle):
        for resource in (handle.insert, handle.write_conn, handle.fetch, handle.read_conn):
            self._close_quietly(resource)

    def _close_quietly(self, resource):
        if resource is None:
            return
        try:
            resource.close()
        except self._errors as ex:
            log.debug('error while closing %r: %s', resource, ex)

    def _report(self, operation, ex):
        log.warning('unable to %s tile (table %s): %s', operation, self.table_name, ex)
        if self.on_error is not None:
            self.on_error(operation, ex)

    def _timeout(self, timeout):
        if timeout is None:
            return self.timeout
        return timeout

    def _fetch(self, key, timeout=None):
        """
        Return the stored bytes for `key` or ``None``.
        """
        if not self.initialize():
            return None

        try:
            with self._fetch_lock:
                handle = self._handle
                if handle.fetch is None:
                    # closed after initialize by another thread
                    return None
                with handle.dialect.deadline(handle.read_conn, handle.fetch.cursor, self._timeout(timeout)):
                    rows = handle.fetch.execute(key.params()).fetchall()
        except self._errors as ex:
            self.close()
            self._report('load', ex)
            return None

        if not rows or rows[0][0] is None:
            return None
        data = bytes(rows[0][0])
        if not data:
            return None
        return data

    def load_tile(self, tile, timeout=None):
        if tile.source is not None:
            return True

        data = self._fetch(tile.key, timeout=timeout)
        if data is None:
            return False
        tile.data = data
        tile.source = self.decoder(data)
        return True

    def load_tiles(self, tiles, timeout=None):
        tiles = [t for t in tiles if t.source is None]
        if not tiles:
            return True
        return async_.map_tiles(self.load_tile, tiles, timeout=timeout)

    def is_cached(self, tile, timeout=None):
        if tile.source is not None:
            return True
        return self._fetch(tile.key, timeout=timeout) is not None

    def store_tile(self, tile, timeout=None):
        if tile.stored:
            return True
        if not tile.data:
            log.warning('refusing to store empty tile %r', tile.key)
            return False

        if not self.initialize():
            return False

        try:
            with self._insert_lock:
                handle = self._handle
                if handle.insert is None:
                    return False
                with handle.dialect.deadline(handle.write_conn, handle.insert.cursor, self._timeout(timeout)):
                    handle.insert.execute(tile.key.params(tile=handle.dialect.binary(tile.data)))
                handle.write_conn.commit()
        except self._errors as ex:
            # duplicate keys end up here as well
            self.close()
            self._report('store', ex)
            return False

        tile.stored = True
        return True

    def store_tiles(self, tiles, timeout=None):
        tiles = [t for t in tiles if not t.stored]
        if not tiles:
            return True
        return async_.map_tiles(self.store_tile, tiles, timeout=timeout)

    def delete_older_than(self, date, type=None):
        raise NotSupportedError("%s does not store timestamps, tiles can not expire" % self.__class__.__name__)

    def __repr__(self):
        return '<%s table=%s initialized=%s>' % (self.__class__.__name__, self.table_name, self._initialized)
