"""Shared fixtures for ravendb-query tests."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import BaseModel

from ravendb_query import DocumentConventions, DocumentSession, ServerNode

FAKE_NODE = ServerNode("http://fake-node:8080", "Northwind")


class Product(BaseModel):
    id: str | None = None
    Name: str
    Price: float = 0


class FakeRequestExecutor:
    """Records submitted commands and answers with queued responses.

    A queued exception is raised instead of returned.  When the queue is
    empty the executor answers ``None`` (no content).
    """

    def __init__(self, *responses: Any) -> None:
        self.responses: list[Any] = list(responses)
        self.commands: list[Any] = []

    def queue(self, *responses: Any) -> None:
        self.responses.extend(responses)

    async def execute(self, command: Any) -> Any:
        command.create_request(FAKE_NODE)
        self.commands.append(command)
        outcome = self.responses.pop(0) if self.responses else None
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    @property
    def last_index_query(self) -> Any:
        return self.commands[-1].index_query


@pytest.fixture
def product_cls() -> type[Product]:
    return Product


@pytest.fixture
def conventions() -> DocumentConventions:
    return DocumentConventions()


@pytest.fixture
def executor() -> FakeRequestExecutor:
    return FakeRequestExecutor()


@pytest.fixture
def session(executor: FakeRequestExecutor, conventions: DocumentConventions) -> DocumentSession:
    return DocumentSession(executor, conventions)


@pytest.fixture
def products(session: DocumentSession):
    """A typed query over the ``Products`` collection."""
    return session.query(collection="Products")
