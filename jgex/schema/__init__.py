"""
Schema management module.

Records JanusGraph schema declarations on the client and submits them to a
Gremlin Server as one management transaction.
"""

from .management import (
    DataType,
    ElementType,
    Multiplicity,
    RemoteManagement,
    SchemaManagement,
)

__all__ = [
    "DataType",
    "ElementType",
    "Multiplicity",
    "RemoteManagement",
    "SchemaManagement",
]
