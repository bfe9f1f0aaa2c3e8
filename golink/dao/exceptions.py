"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    LinkNotFoundError:
        Raised when a LinkModel is not found in the data store.

    LinkAlreadyExistsError:
        Raised when attempting to create a LinkModel whose short code is taken.

    DataStoreError:
        Raised when there is an error in the data store (e.g., connection issues, timeouts, OOM, etc.).

Example:
    >>> from golink.dao.exceptions import LinkNotFoundError
    >>> raise LinkNotFoundError("Link with short code 'abc' not found.")
    Traceback (most recent call last):
        ...
    golink.dao.exceptions.LinkNotFoundError: Link with short code 'abc' not found.
"""

from golink.exceptions import GolinkError


class DAOError(GolinkError):
    """Generic base class for DAO-related exceptions."""

    error_code = 'dao:dao_error'


class LinkNotFoundError(DAOError):
    """Exception raised when a LinkModel is not found in the data store."""

    error_code = 'dao:link_not_found_error'


class LinkAlreadyExistsError(DAOError):
    """Exception raised when attempting to create a LinkModel that already exists in the data store."""

    error_code = 'dao:link_already_exists_error'


class DataStoreError(DAOError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, OOM, etc.
    """

    error_code = 'dao:data_store_error'
