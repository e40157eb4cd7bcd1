"""
Exception hierarchy for the graph application.

Read failures propagate to the caller; mutation failures are logged at the
operation boundary and the transaction is rolled back.
"""


class GraphAppError(Exception):
    """Base class for all application errors."""


class ConfigurationError(GraphAppError):
    """The graph configuration file is missing, malformed or invalid."""


class GraphConnectionError(GraphAppError):
    """The graph store could not be reached or the connection setup failed."""


class SchemaError(GraphAppError):
    """A schema declaration is invalid or the management transaction failed."""


class QueryError(GraphAppError):
    """A read traversal failed."""


class MutationError(GraphAppError):
    """A traversal that creates, updates or deletes elements failed."""
