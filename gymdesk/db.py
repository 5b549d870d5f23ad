from contextlib import contextmanager

import pymysql

from gymdesk import config


class ConnectionWrapper:
    def __init__(self, conn):
        self._conn = conn

    def cursor(self, dictionary=False):
        if dictionary:
            return self._conn.cursor(pymysql.cursors.DictCursor)
        return self._conn.cursor()

    def commit(self):
        return self._conn.commit()

    def rollback(self):
        return self._conn.rollback()

    def close(self):
        return self._conn.close()


class Database:
    """
    Connection factory built once at process start and handed to the
    repositories. Each unit of work opens its own connection.
    """

    def __init__(
        self,
        host: str = config.DB_HOST,
        port: int = config.DB_PORT,
        user: str = config.DB_USER,
        password: str = config.DB_PASSWORD,
        database: str = config.DB_NAME,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database

    def connect(self) -> ConnectionWrapper:
        """Get MySQL connection with dictionary cursor support"""
        conn = pymysql.connect(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
            database=self.database,
            charset="utf8mb4",
            cursorclass=pymysql.cursors.DictCursor,
        )
        return ConnectionWrapper(conn)

    @contextmanager
    def transaction(self):
        """
        Yield a dictionary cursor; commit on success, rollback on error.
        """
        conn = self.connect()
        cursor = conn.cursor(dictionary=True)
        try:
            yield cursor
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

