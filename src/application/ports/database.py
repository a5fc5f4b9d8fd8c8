"""Database ports for the rate store.

This module defines the application-layer protocol for accessing the
database engine that backs the durable rate store. Infrastructure
implementations are expected to provide concrete adapters that satisfy it.
"""

from typing import Protocol

from sqlalchemy.engine import Engine


class DatabaseEnginePort(Protocol):
    """Port exposing the rate store database engine.

    Application use cases can depend on this protocol instead of concrete
    database drivers or configuration details.
    """

    def get_rates_engine(self) -> Engine:
        """Get the engine for the rate store database.

        Returns:
            Engine: SQLAlchemy engine connected to the rate store.
        """


__all__ = ["DatabaseEnginePort"]
