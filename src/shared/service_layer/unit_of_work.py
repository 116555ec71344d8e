# pylint: disable=attribute-defined-outside-init
from __future__ import annotations

"""Abstract Unit of Work pattern for coordinating operations across repositories."""

import abc
from typing import List

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

import config


class AbstractUnitOfWork(abc.ABC):
    """Abstract Unit of Work for coordinating operations across repositories."""

    def __enter__(self) -> AbstractUnitOfWork:
        return self

    def __exit__(self, *args):
        self.rollback()

    def commit(self):
        self._commit()

    def collect_new_events(self) -> List:
        """Collect domain events from aggregates seen by the repositories."""
        events = []
        for repo in self._repositories():
            if repo is None:
                continue
            for aggregate in repo.seen:
                while aggregate.events:
                    events.append(aggregate.events.pop(0))
        return events

    def _repositories(self) -> List:
        return []

    @abc.abstractmethod
    def _commit(self):
        raise NotImplementedError

    @abc.abstractmethod
    def rollback(self):
        raise NotImplementedError


DEFAULT_SESSION_FACTORY = sessionmaker(
    bind=create_engine(
        config.get_postgres_uri(),
        isolation_level="REPEATABLE READ",
    )
)


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """Session handling shared by the SQLAlchemy units of work of each context."""

    def __init__(self, session_factory=DEFAULT_SESSION_FACTORY):
        self.session_factory = session_factory

    def __enter__(self):
        self.session = self.session_factory()  # type: Session
        self._open_repositories(self.session)
        return super().__enter__()

    def __exit__(self, *args):
        super().__exit__(*args)
        self.session.close()

    def _commit(self):
        self.session.commit()

    def rollback(self):
        self.session.rollback()

    @abc.abstractmethod
    def _open_repositories(self, session: Session):
        raise NotImplementedError
