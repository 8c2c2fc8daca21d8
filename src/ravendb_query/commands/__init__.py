from ravendb_query.commands.base import RavenCommand
from ravendb_query.commands.documents import GetDocumentCommand, PutDocumentCommand
from ravendb_query.commands.query import QueryCommand

__all__ = [
    "GetDocumentCommand",
    "PutDocumentCommand",
    "QueryCommand",
    "RavenCommand",
]
