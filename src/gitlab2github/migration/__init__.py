"""Repository directory, migration components and coordinator."""

from .directory import RepositoryDirectory
from .engine import MigrationEngine
from .exceptions import (
    CommentReplicationError,
    DirectoryFetchError,
    ImportFailedError,
    ImportTimeoutError,
    IssueReplicationError,
    LabelSyncError,
    MigrationError,
    MilestoneError,
    SourceNotFoundError,
    TargetAlreadyExistsError,
    UnknownRepositoryError,
)
from .importer import RepositoryImporter
from .issues import IssueReplicator
from .labels import LabelSynchronizer
from .milestones import MilestoneTranslator
from .orchestrator import MigrationCoordinator, MigrationSummary
from .strategy import MigrationContext, MigrationResult, MigrationStatus

__all__ = [
    'CommentReplicationError',
    'DirectoryFetchError',
    'ImportFailedError',
    'ImportTimeoutError',
    'IssueReplicationError',
    'IssueReplicator',
    'LabelSyncError',
    'LabelSynchronizer',
    'MigrationContext',
    'MigrationCoordinator',
    'MigrationEngine',
    'MigrationError',
    'MigrationResult',
    'MigrationStatus',
    'MigrationSummary',
    'MilestoneError',
    'MilestoneTranslator',
    'RepositoryDirectory',
    'RepositoryImporter',
    'SourceNotFoundError',
    'TargetAlreadyExistsError',
    'UnknownRepositoryError',
]
