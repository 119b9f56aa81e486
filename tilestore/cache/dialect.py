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
SQL dialects of the supported tile cache databases.

A dialect knows how to connect to its database, how to look up and create
the tile table and how to limit the runtime of a single query.
"""

import os
import re
import sqlite3
import time
from contextlib import contextmanager

try:
    import psycopg2  # type: ignore
except ImportError:
    psycopg2 = None  # type: ignore

from tilestore.cache.base import CacheBackendError
from tilestore.exception import ConfigurationError

import logging
log = logging.getLogger(__name__)


TABLE_NAME_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
MAX_TABLE_NAME_LENGTH = 60


def check_table_name(table_name):
    """
    >>> check_table_name("GMapNETCache")
    'GMapNETCache'
    >>> check_table_name("tiles_2")
    'tiles_2'
    >>> check_table_name("tiles-2")
    Traceback (most recent call last):
    ...
    tilestore.exception.ConfigurationError: The table_name tiles-2 contains unsupported characters.
    >>> check_table_name("tiles; DROP TABLE tiles")
    Traceback (most recent call last):
    ...
    tilestore.exception.ConfigurationError: The table_name tiles; DROP TABLE tiles contains unsupported characters.

    Table names are interpolated into DDL statements and need to be plain
    identifiers: letters, digits and underscores, not starting with a digit.
    """
    if not isinstance(table_name, str) or not table_name:
        raise ConfigurationError("table_name is required")
    if len(table_name) > MAX_TABLE_NAME_LENGTH:
        raise ConfigurationError("The table_name {0} is longer than {1} characters.".format(
            table_name, MAX_TABLE_NAME_LENGTH))
    if not TABLE_NAME_RE.match(table_name):
        raise ConfigurationError("The table_name {0} contains unsupported characters.".format(table_name))
    return table_name


def connection_scheme(connection_string):
    """
    >>> connection_scheme('sqlite:////tmp/tiles.db')
    'sqlite'
    >>> connection_scheme('PostgreSQL://user@localhost/tiles')
    'postgresql'
    """
    if not isinstance(connection_string, str) or not connection_string:
        raise ConfigurationError("connection string is required")
    scheme, sep, _ = connection_string.partition('://')
    if not sep or not scheme:
        raise ConfigurationError("connection string needs a scheme, e.g. sqlite:///tiles.db")
    return scheme.lower()


class Dialect(object):
    """
    Base class of all dialects.
    """
    schemes = ()
    integer_type = 'INTEGER'
    binary_type = 'BLOB'

    #: exception classes of the database driver
    errors = ()

    def __init__(self, connection_string, timeout=30):
        self.connection_string = connection_string
        self.timeout = timeout

    def connect(self, read_only=False):
        """
        Open a new database connection. `read_only` connections are only
        used for SELECT statements.
        """
        raise NotImplementedError()

    def param(self, name):
        """
        Return the placeholder for the named parameter `name`.
        """
        raise NotImplementedError()

    def table_exists(self, conn, table_name):
        raise NotImplementedError()

    def create_table_stmt(self, table_name):
        return (
            "CREATE TABLE {table} (\n"
            "    Type {int} NOT NULL,\n"
            "    Zoom {int} NOT NULL,\n"
            "    X    {int} NOT NULL,\n"
            "    Y    {int} NOT NULL,\n"
            "    Tile {blob} NOT NULL,\n"
            "    CONSTRAINT PK_{table} PRIMARY KEY (Type, Zoom, X, Y)\n"
            ")"
        ).format(table=check_table_name(table_name), int=self.integer_type, blob=self.binary_type)

    def create_table(self, conn, table_name):
        stmt = self.create_table_stmt(table_name)
        log.debug('creating tile table: %s', stmt)
        cur = conn.cursor()
        try:
            cur.execute(stmt)
        finally:
            cur.close()
        conn.commit()

    def fetch_stmt(self, table_name):
        p = self.param
        return "SELECT Tile FROM {0} WHERE X = {1} AND Y = {2} AND Zoom = {3} AND Type = {4}".format(
            check_table_name(table_name), p('x'), p('y'), p('zoom'), p('type'))

    def insert_stmt(self, table_name):
        p = self.param
        return "INSERT INTO {0} (X, Y, Zoom, Type, Tile) VALUES ({1}, {2}, {3}, {4}, {5})".format(
            check_table_name(table_name), p('x'), p('y'), p('zoom'), p('type'), p('tile'))

    def prepare_fetch(self, cursor, table_name):
        """
        Prepare the fetch statement on `cursor` and return the statement to
        execute with the key parameters.
        """
        return self.fetch_stmt(table_name)

    def binary(self, data):
        return data

    @contextmanager
    def deadline(self, conn, cursor, timeout):
        """
        Limit the runtime of the statements executed within this context.
        """
        yield


class SQLiteDialect(Dialect):
    schemes = ('sqlite',)
    errors = (sqlite3.Error,)

    def __init__(self, connection_string, timeout=30, wal=False):
        Dialect.__init__(self, connection_string, timeout=timeout)
        self.path = self.parse_path(connection_string)
        self.wal = wal

    @staticmethod
    def parse_path(connection_string):
        """
        >>> SQLiteDialect.parse_path('sqlite:///tiles.db')
        'tiles.db'
        >>> SQLiteDialect.parse_path('sqlite:////var/cache/tiles.db')
        '/var/cache/tiles.db'
        """
        _, _, path = connection_string.partition('://')
        if not path.startswith('/') or len(path) < 2:
            raise ConfigurationError("sqlite connection string needs a file, e.g. sqlite:///tiles.db")
        return path[1:]

    def connect(self, read_only=False):
        dirname = os.path.dirname(self.path)
        if dirname and not os.path.exists(dirname):
            os.makedirs(dirname, exist_ok=True)
        conn = sqlite3.connect(self.path, timeout=self.timeout, check_same_thread=False)
        if self.wal and not read_only:
            conn.execute('PRAGMA journal_mode=wal')
        return conn

    def param(self, name):
        return ':' + name

    def table_exists(self, conn, table_name):
        # sqlite identifiers are case-insensitive
        cur = conn.execute(
            "SELECT COUNT(1) FROM sqlite_master WHERE type = 'table' AND lower(name) = lower(:name)",
            {'name': table_name})
        try:
            return cur.fetchone()[0] > 0
        finally:
            cur.close()

    @contextmanager
    def deadline(self, conn, cursor, timeout):
        if not timeout:
            yield
            return
        expires = time.monotonic() + timeout

        def interrupt():
            # non-zero return value aborts the statement with OperationalError
            return int(time.monotonic() > expires)

        # busy_timeout limits the wait for locks of other connections
        conn.execute('PRAGMA busy_timeout = %d' % max(1, int(timeout * 1000)))
        conn.set_progress_handler(interrupt, 1000)
        try:
            yield
        finally:
            conn.set_progress_handler(None, 1000)
            conn.execute('PRAGMA busy_timeout = %d' % int(self.timeout * 1000))


class PostgresDialect(Dialect):
    schemes = ('postgresql', 'postgres')
    binary_type = 'BYTEA'
    errors = (psycopg2.Error,) if psycopg2 is not None else ()

    fetch_statement_name = 'tilestore_fetch'

    def connect(self, read_only=False):
        if psycopg2 is None:
            raise CacheBackendError("PostgreSQL backend requires 'psycopg2' package.")
        conn = psycopg2.connect(self.connection_string, connect_timeout=max(1, int(self.timeout)))
        if read_only:
            # never keep the read connection idle in a transaction
            conn.autocommit = True
        return conn

    def param(self, name):
        return '%(' + name + ')s'

    def table_exists(self, conn, table_name):
        # unquoted identifiers are folded to lower case
        cur = conn.cursor()
        try:
            cur.execute(
                "SELECT COUNT(1) FROM information_schema.tables"
                " WHERE table_schema = current_schema() AND table_name = lower(%(name)s)",
                {'name': table_name})
            return cur.fetchone()[0] > 0
        finally:
            cur.close()

    def prepare_fetch(self, cursor, table_name):
        cursor.execute(
            "PREPARE {0} (integer, integer, integer, integer) AS"
            " SELECT Tile FROM {1} WHERE X = $1 AND Y = $2 AND Zoom = $3 AND Type = $4".format(
                self.fetch_statement_name, check_table_name(table_name)))
        return "EXECUTE {0} (%(x)s, %(y)s, %(zoom)s, %(type)s)".format(self.fetch_statement_name)

    def binary(self, data):
        return psycopg2.Binary(data)

    @contextmanager
    def deadline(self, conn, cursor, timeout):
        if not timeout:
            yield
            return
        cursor.execute("SET statement_timeout = %s", (max(1, int(timeout * 1000)), ))
        yield
        # not reached on errors, the connection is closed in that case
        cursor.execute("SET statement_timeout = DEFAULT")


dialects = {}


def register_dialect(dialect_class):
    for scheme in dialect_class.schemes:
        dialects[scheme] = dialect_class


register_dialect(SQLiteDialect)
register_dialect(PostgresDialect)


def load_dialect(connection_string, timeout=30, wal=False):
    """
    Return the dialect for the scheme of `connection_string`.

    >>> load_dialect('sqlite:///tiles.db').path
    'tiles.db'
    >>> load_dialect('mysql://localhost/tiles')
    Traceback (most recent call last):
    ...
    tilestore.exception.ConfigurationError: unsupported database 'mysql' in connection string
    """
    scheme = connection_scheme(connection_string)
    if scheme not in dialects:
        raise ConfigurationError("unsupported database '{0}' in connection string".format(scheme))
    dialect_class = dialects[scheme]
    if dialect_class is SQLiteDialect:
        return dialect_class(connection_string, timeout=timeout, wal=wal)
    return dialect_class(connection_string, timeout=timeout)


def database_errors():
    """
    Exception classes of all registered dialects.
    """
    # sqlite3 raises OverflowError for integers outside of 64 bit
    errors = [CacheBackendError, OverflowError]
    for dialect_class in dialects.values():
        for error in dialect_class.errors:
            if error not in errors:
                errors.append(error)
    return tuple(errors)
