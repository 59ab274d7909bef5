"""Idempotent deployment of repository configuration to its destination."""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from .backup import move_aside
from .categories import ConfigCategory
from .compare import identical
from .transfer import copy_tree

logger = logging.getLogger(__name__)


class MissingSourceError(FileNotFoundError):
    """The repository has no content for a category."""

    def __init__(self, category: ConfigCategory):
        super().__init__(
            f"Repository has no {category.name} config at {category.repo_path}"
        )
        self.category = category


class Decision(Enum):
    SKIP = "skip"
    INSTALL = "install"
    OVERWRITE = "overwrite"


@dataclass
class DeployResult:
    category: ConfigCategory
    decision: Optional[Decision] = None
    backup: Optional[Path] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Deployer:
    """Copies category content from the repository to the destination.

    The destination is only touched when it is missing, differs from the
    repository, or a redeploy is forced. Anything it replaces is moved
    aside to a timestamped backup first.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock

    def decide(self, category: ConfigCategory, force: bool = False) -> Decision:
        destination = category.destination
        if not destination.exists() and not destination.is_symlink():
            return Decision.INSTALL
        if not force and identical(
            destination, category.repo_path, category.scope
        ):
            return Decision.SKIP
        return Decision.OVERWRITE

    def deploy(self, category: ConfigCategory, force: bool = False) -> DeployResult:
        """Deploy one category.

        Raises MissingSourceError when the repository side is absent and
        OSError for any filesystem failure while backing up or copying.
        """
        if not category.repo_path.exists():
            raise MissingSourceError(category)

        decision = self.decide(category, force)
        result = DeployResult(category=category, decision=decision)

        if decision is Decision.SKIP:
            logger.debug(f"{category.name} is up to date")
            return result

        if decision is Decision.OVERWRITE:
            result.backup = move_aside(
                category.destination, category.scope, clock=self.clock
            )
            logger.info(f"Backed up {category.destination} to {result.backup}")

        copy_tree(category.repo_path, category.destination, category.scope)
        logger.info(f"Deployed {category.name} to {category.destination}")
        return result

    def deploy_all(
        self,
        categories: Iterable[ConfigCategory],
        force: bool = False,
    ) -> List[DeployResult]:
        """Deploy each category, recording failures instead of stopping."""
        results = []
        for category in categories:
            try:
                results.append(self.deploy(category, force=force))
            except OSError as e:
                logger.error(f"Deploying {category.name} failed: {e}")
                results.append(
                    DeployResult(category=category, error=describe_error(e))
                )
        return results


def describe_error(error: OSError) -> str:
    """Readable message for a filesystem error, naming the path involved."""
    if isinstance(error, MissingSourceError):
        return str(error)
    message = error.strerror or str(error)
    if error.filename:
        return f"{message}: {error.filename}"
    return message
