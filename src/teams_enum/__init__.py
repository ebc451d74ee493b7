from .application.pool import CancellationToken, PoolReport, WorkerPool
from .application.services import EnumerationService
from .adapters.teams.client import TeamsClient
from .adapters.teams.mock import MockTeamsClient
from .infrastructure.sink import InMemoryResultSink, LineResultSink
from .infrastructure.source import iter_identities, open_identity_source

__all__ = [
    "CancellationToken",
    "PoolReport",
    "WorkerPool",
    "EnumerationService",
    "TeamsClient",
    "MockTeamsClient",
    "InMemoryResultSink",
    "LineResultSink",
    "iter_identities",
    "open_identity_source",
]
