import configparser
import logging
import os
import stat
from pathlib import Path
from typing import List

from coprctl.domain.identifiers import DEPENDENCY_ID_PREFIX, project_id_to_config_filename, repo_id_to_project_id
from coprctl.domain.models import RepositorySet

logger = logging.getLogger(__name__)

# Added to whatever mode the file already has, never removed
REPO_FILE_MODE = stat.S_IRUSR | stat.S_IWUSR | stat.S_IRGRP | stat.S_IROTH


class RepoFileStore:
    """
    Reads and writes the .repo files of Copr projects in the repository configuration directory.
    """

    def __init__(self, repos_dir: str):
        self.repos_dir = Path(repos_dir)

    def path_for(self, repository_set: RepositorySet) -> Path:
        return self.repos_dir / project_id_to_config_filename(repository_set.id)

    def save(self, repository_set: RepositorySet) -> Path:
        """
        Writes all parts of the set into the project's repo file, replacing any previous content.

        Returns:
            Path: The written file.
        """
        path = self.path_for(repository_set)
        path.write_text(repository_set.render())
        os.chmod(path, stat.S_IMODE(path.stat().st_mode) | REPO_FILE_MODE)
        logger.info(f"Repository file written: {path}")
        return path

    def installed_sets(self) -> List[RepositorySet]:
        """
        Reconstructs one RepositorySet per repo file containing a Copr repository.
        Files without any Copr section are not Copr-managed and are skipped.
        """
        if not self.repos_dir.is_dir():
            logger.debug(f"Repository directory {self.repos_dir} does not exist.")
            return []

        sets = []
        for path in sorted(self.repos_dir.glob("*.repo")):
            parser = configparser.ConfigParser(interpolation=None)
            try:
                parser.read(path, encoding="utf-8")
            except (configparser.Error, UnicodeDecodeError) as e:
                logger.warning(f"Skipping unparsable repo file {path}: {e}")
                continue

            repository_set = RepositorySet()
            for section in parser.sections():
                # Repositories of other vendors are not ours to inspect
                if not repo_id_to_project_id(section) and not section.startswith(DEPENDENCY_ID_PREFIX):
                    continue
                try:
                    enabled = parser.getboolean(section, "enabled", fallback=True)
                except ValueError as e:
                    logger.warning(f"Repository '{section}' in {path}: {e}, assuming enabled.")
                    enabled = True
                repository_set.add_local_part(section, enabled)

            if repository_set.id:
                sets.append(repository_set)
        return sets
