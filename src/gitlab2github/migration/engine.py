"""Migration engine - builds clients and coordinator from configuration."""

from loguru import logger

from ..api.client import ClientFactory
from ..api.rate_limiter import WriteThrottle
from ..config.config import Config
from ..models.user import UserMapping
from .directory import RepositoryDirectory
from .orchestrator import MigrationCoordinator
from .strategy import MigrationContext


class MigrationEngine:
    """Wires configuration, API clients and the coordinator for one run."""

    def __init__(self, config: Config):
        """Initialize migration engine.

        Args:
            config: Migration configuration
        """
        self.config = config
        self.logger = logger.bind(component='MigrationEngine')

        self.gitlab_client = ClientFactory.create_gitlab_client(config.gitlab)
        self.github_client = ClientFactory.create_github_client(config.github)

        self.context = MigrationContext(
            gitlab_client=self.gitlab_client,
            github_client=self.github_client,
            directory=RepositoryDirectory(self.gitlab_client, self.github_client),
            settings=config.migration,
            user_mapping=UserMapping(
                users=config.users,
                default_assignee=config.migration.default_assignee,
            ),
            throttle=WriteThrottle(config.migration.write_delay),
            gitlab_username=config.gitlab.username,
            gitlab_password=config.gitlab.password,
        )

        self.coordinator = MigrationCoordinator(self.context, config.repositories)

    def test_connectivity(self) -> None:
        """Test connectivity to GitLab and GitHub.

        Raises:
            ConnectionError: If either API cannot be reached
        """
        self.logger.info('Testing connectivity to GitLab and GitHub')

        if not self.gitlab_client.test_connection():
            raise ConnectionError('Cannot connect to GitLab')

        if not self.github_client.test_connection():
            raise ConnectionError('Cannot connect to GitHub')

        self.logger.info('Connectivity tests passed')

    def close(self) -> None:
        self.gitlab_client.close()
        self.github_client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
