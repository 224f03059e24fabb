"""Data models for repositories, labels, milestones, issues and users."""

from .issue import CommentRecord, IssueRecord
from .label import LabelDef
from .milestone import MilestoneMapping
from .repository import ImportResult, ImportState, RemoteRepository, RepositorySystem
from .user import UserMapping

__all__ = [
    'CommentRecord',
    'ImportResult',
    'ImportState',
    'IssueRecord',
    'LabelDef',
    'MilestoneMapping',
    'RemoteRepository',
    'RepositorySystem',
    'UserMapping',
]
