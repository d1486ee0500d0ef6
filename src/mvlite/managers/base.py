"""Base manager class shared by the registry and the view manager."""

from mvlite.core.connection import DatabaseConnection


class BaseManager:
    """Base class for mvlite managers.

    Managers hold no state of their own beyond the connection they are given;
    every call round-trips through the store.
    """

    def __init__(self, conn: DatabaseConnection):
        """Initialize base manager with a database connection.

        Args:
            conn: Open DatabaseConnection shared with the caller
        """
        self.conn = conn
