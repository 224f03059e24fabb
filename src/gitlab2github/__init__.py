"""GitLab to GitHub Migration Tool

Imports GitLab repositories into a GitHub organization and replays their
labels, milestones, issues and comments through the REST APIs of both
systems.
"""

__version__ = '0.1.0'

from .cli.main import main

__all__ = ['main']
