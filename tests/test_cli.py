"""Tests for CLI interface."""

import os
import tempfile
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import yaml
from click.testing import CliRunner

from gitlab2github.cli.main import _mask, cli, init
from gitlab2github.config.config import Config
from gitlab2github.migration.exceptions import UnknownRepositoryError
from gitlab2github.migration.orchestrator import MigrationSummary
from gitlab2github.migration.strategy import MigrationResult, MigrationStatus
from gitlab2github.models.repository import (
    ImportResult,
    ImportState,
    RemoteRepository,
    RepositorySystem,
)


def make_config(**overrides):
    data = {
        'gitlab': {'url': 'https://gitlab.example.com', 'token': 'gitlab-secret-token'},
        'github': {'token': 'github-secret-token', 'organization': 'acme'},
        'repositories': ['widget', 'gadget'],
    }
    data.update(overrides)
    return Config(**data)


def make_result(name, success=True, **metadata):
    return MigrationResult(
        operation='migrate',
        repository=name,
        status=MigrationStatus.COMPLETED if success else MigrationStatus.FAILED,
        started_at=datetime.now(),
        completed_at=datetime.now(),
        success=success,
        error_message=None if success else 'boom',
        metadata=metadata,
    )


def make_summary(*results):
    successful = sum(1 for r in results if r.success)
    return MigrationSummary(
        operation='migrate',
        total=len(results),
        successful=successful,
        failed=len(results) - successful,
        started_at=datetime.now(),
        completed_at=datetime.now(),
        results=list(results),
    )


class CLITestCase:
    """Shared fixtures for commands that talk to both APIs."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()
        self.config = make_config()
        self.coordinator = MagicMock()

        self.engine = MagicMock()
        self.engine.coordinator = self.coordinator

        self.load_patch = patch(
            'gitlab2github.cli.main._load_config', return_value=self.config
        )
        self.engine_patch = patch('gitlab2github.cli.main.MigrationEngine')

        self.load_patch.start()
        engine_class = self.engine_patch.start()
        engine_class.return_value.__enter__.return_value = self.engine
        self.engine_class = engine_class

    def teardown_method(self):
        patch.stopall()


class TestCLI(CLITestCase):
    """Test CLI commands."""

    def test_cli_help(self):
        result = self.runner.invoke(cli, ['--help'])

        assert result.exit_code == 0
        assert 'GitLab to GitHub Migration Tool' in result.output
        for command in ('init', 'list', 'projects', 'import', 'remove', 'migrate'):
            assert command in result.output

    def test_cli_version(self):
        result = self.runner.invoke(cli, ['--version'])

        assert result.exit_code == 0
        assert '0.1.0' in result.output

    def test_init_command(self):
        """Test init command writes a loadable template."""
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = os.path.join(temp_dir, 'test_config.yaml')

            result = self.runner.invoke(init, ['--output', config_path])

            assert result.exit_code == 0
            assert 'Configuration template created' in result.output

            with open(config_path, 'r') as f:
                content = yaml.safe_load(f)
            assert set(content) >= {'gitlab', 'github', 'migration', 'users'}
            Config.from_file(config_path)

    def test_list_command(self):
        result = self.runner.invoke(cli, ['list'])

        assert result.exit_code == 0
        assert 'widget' in result.output
        assert 'gadget' in result.output
        self.engine_class.assert_not_called()

    def test_migrate_single_repository(self):
        self.coordinator.migrate_one = AsyncMock(
            return_value=make_result('widget', issues_created=3)
        )

        result = self.runner.invoke(cli, ['migrate', '--repo', 'widget'])

        assert result.exit_code == 0
        assert 'Migrated widget' in result.output
        assert 'issues_created: 3' in result.output
        self.coordinator.migrate_one.assert_awaited_once_with('widget')

    def test_migrate_unknown_repository_exits_nonzero(self):
        self.coordinator.migrate_one = AsyncMock(
            side_effect=UnknownRepositoryError('not on GitHub', repository='ghost')
        )

        result = self.runner.invoke(cli, ['migrate', '-r', 'ghost'])

        assert result.exit_code == 1
        assert 'not on GitHub' in result.output

    def test_migrate_all_reports_failures(self):
        self.coordinator.migrate_all = AsyncMock(
            return_value=make_summary(
                make_result('widget', issues_created=1),
                make_result('gadget', success=False),
            )
        )

        result = self.runner.invoke(cli, ['migrate'])

        assert result.exit_code == 1
        assert '1 of 2 repositories succeeded' in result.output
        assert 'boom' in result.output

    def test_migrate_all_success(self):
        self.coordinator.migrate_all = AsyncMock(
            return_value=make_summary(make_result('widget'))
        )

        result = self.runner.invoke(cli, ['migrate'])

        assert result.exit_code == 0
        assert '1 of 1 repositories succeeded' in result.output

    def test_import_single_repository(self):
        self.coordinator.import_one = AsyncMock(
            return_value=ImportResult(
                repository='widget', state=ImportState.COMPLETE, polls=4
            )
        )

        result = self.runner.invoke(cli, ['import', 'widget'])

        assert result.exit_code == 0
        assert 'Imported widget after 4 status checks' in result.output

    def test_import_requires_name_or_all(self):
        result = self.runner.invoke(cli, ['import'])

        assert result.exit_code == 2
        self.engine_class.assert_not_called()

    def test_remove_with_confirmation_flag(self):
        self.coordinator.remove_one = AsyncMock(return_value=None)

        result = self.runner.invoke(cli, ['remove', 'widget', '--yes'])

        assert result.exit_code == 0
        assert 'Removed widget' in result.output
        self.coordinator.remove_one.assert_awaited_once_with('widget')

    def test_remove_aborted(self):
        self.coordinator.remove_one = AsyncMock(return_value=None)

        result = self.runner.invoke(cli, ['remove', 'widget'], input='n\n')

        assert result.exit_code == 1
        self.coordinator.remove_one.assert_not_called()

    def test_projects_command(self):
        self.coordinator.list_projects = AsyncMock(
            return_value={
                RepositorySystem.GITLAB: [
                    RemoteRepository(
                        id=1, name='widget', system=RepositorySystem.GITLAB
                    )
                ],
                RepositorySystem.GITHUB: [],
            }
        )

        result = self.runner.invoke(cli, ['projects'])

        assert result.exit_code == 0
        assert 'Gitlab repositories' in result.output
        assert 'widget' in result.output

    def test_authors_command(self):
        self.coordinator.map_authors = AsyncMock(
            return_value={'alice': 'alice-gh', 'bob': None}
        )

        result = self.runner.invoke(cli, ['authors', 'widget'])

        assert result.exit_code == 0
        assert 'alice-gh' in result.output
        assert 'unmapped' in result.output

    def test_validate_command_success(self):
        result = self.runner.invoke(cli, ['validate'])

        assert result.exit_code == 0
        assert 'Connectivity validation passed' in result.output
        self.engine.test_connectivity.assert_called_once()

    def test_validate_command_failure(self):
        self.engine.test_connectivity.side_effect = ConnectionError('GitHub down')

        result = self.runner.invoke(cli, ['validate'])

        assert result.exit_code == 1
        assert 'GitHub down' in result.output

    def test_status_masks_tokens(self):
        result = self.runner.invoke(cli, ['status'])

        assert result.exit_code == 0
        assert 'Migration Configuration' in result.output
        assert 'acme' in result.output
        assert 'github-secret-token' not in result.output
        assert 'gitlab-secret-token' not in result.output

    def test_config_not_found(self):
        with patch(
            'gitlab2github.cli.main._load_config',
            side_effect=FileNotFoundError('No configuration found'),
        ):
            result = self.runner.invoke(cli, ['migrate'])

        assert result.exit_code == 1
        assert 'No configuration found' in result.output


class TestHelpers:
    """Test CLI helper functions."""

    def test_mask(self):
        assert _mask('abcdefghijkl') == 'abcd…'
        assert _mask('short') == '****'
        assert 'not set' in _mask(None)
