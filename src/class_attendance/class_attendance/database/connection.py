from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

import mysql.connector
from mysql.connector import errors, pooling

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = 5

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "class_attendance")),
            pool_size=int(db_config.get("pool_size", 5)),
        )

    def connect_args(self) -> dict:
        return {
            "host": self.host,
            "port": int(self.port),
            "user": self.user,
            "password": self.password,
            "database": self.database,
        }


class DatabaseConnection:
    """Pooled DB connection factory.

    One instance is built by the container and injected into every repository.
    Connections are short-lived: borrowed per operation and returned on close().
    When every pooled connection is checked out, a plain short-lived
    connection is opened instead so bursts never surface as pool errors.
    """

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: pooling.MySQLConnectionPool | None = None
        self._pool_lock = threading.Lock()

    @property
    def config(self) -> DBConfig:
        return self._config

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        with self._pool_lock:
            if self._pool is None:
                self._pool = pooling.MySQLConnectionPool(
                    pool_name=f"class_attendance_{self._config.database}",
                    pool_size=int(self._config.pool_size),
                    **self._config.connect_args(),
                )
            return self._pool

    def connect(self):
        try:
            return self._get_pool().get_connection()
        except errors.PoolError:
            logger.warning("Connection pool exhausted; opening a direct connection")
            return mysql.connector.connect(**self._config.connect_args())
