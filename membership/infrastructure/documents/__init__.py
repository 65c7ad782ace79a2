"""
Document session infrastructure.
Provides a unit-of-work session over MongoDB (motor) or an in-memory store.
"""

from .document import Document, generate_document_id
from .session import DocumentSession
from .motor_session import MotorDocumentSession
from .memory_session import InMemoryDocumentSession, InMemoryDocumentStore

__all__ = [
    "Document",
    "generate_document_id",
    "DocumentSession",
    "MotorDocumentSession",
    "InMemoryDocumentSession",
    "InMemoryDocumentStore",
]
