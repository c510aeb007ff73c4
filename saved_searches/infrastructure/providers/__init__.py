"""Infrastructure provider accessors package.

Service providers live in ``saved_search_provider`` and are imported from
there directly; they depend on the repositories, which in turn resolve the
database manager through this package.
"""

from .database_provider import (  # noqa: F401
    get_database_manager,
    reset_database_manager,
    set_database_manager,
)

__all__ = [
    "get_database_manager",
    "reset_database_manager",
    "set_database_manager",
]
