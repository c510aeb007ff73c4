"""Adapters implementing domain collaborator interfaces."""

from .keyed_lock import KeyedLockRegistry
from .mail_transport import LocalMailTransport, SmtpMailTransport
from .query_executor import HttpQueryExecutor

__all__ = [
    "HttpQueryExecutor",
    "KeyedLockRegistry",
    "LocalMailTransport",
    "SmtpMailTransport",
]
