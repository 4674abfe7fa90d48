import logging
import re
from typing import Iterable, List, Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field

from coprctl.domain.descriptor import RepoOptions
from coprctl.domain.identifiers import DEPENDENCY_ID_PREFIX, repo_id_to_project_id

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 99
DEFAULT_COST = 0

MULTILIB_REPO_ID = re.compile(r"^copr:[^:]+:[^:]+:.+:ml\d*$")


class RepositoryPart(BaseModel):
    """
    One enable-able repository: the main project repository, one of its
    multilib variants or an external dependency.
    """
    id: str = ""
    enabled: bool = True
    base_url: str = ""
    name: str = ""
    # Empty means gpgcheck is disabled
    gpg_key_url: str = ""
    priority: int = DEFAULT_PRIORITY
    cost: int = DEFAULT_COST
    module_hotfixes: bool = False

    @classmethod
    def from_local(cls, repo_id: str, enabled: bool) -> "RepositoryPart":
        """Part of an already installed repo file, only used for inspection."""
        return cls(id=repo_id, enabled=enabled)

    def apply_options(self, opts: Optional[RepoOptions]) -> None:
        """Applies the keys present in opts; calling it repeatedly lets later options win."""
        if opts is None:
            return
        if opts.cost is not None:
            self.cost = opts.cost
        if opts.priority is not None:
            self.priority = opts.priority
        if opts.module_hotfixes is not None:
            self.module_hotfixes = opts.module_hotfixes
        if opts.id is not None:
            self.id = opts.id
        if opts.name is not None:
            self.name = opts.name

    def render(self) -> str:
        # The key order is relied upon by tools parsing the files
        lines = [
            f"[{self.id}]",
            f"name={self.name}",
            f"baseurl={self.base_url}",
            "type=rpm-md",
            "skip_if_unavailable=True",
            f"gpgcheck={1 if self.gpg_key_url else 0}",
        ]
        if self.gpg_key_url:
            lines.append(f"gpgkey={self.gpg_key_url}")
        lines.append("repo_gpgcheck=0")
        if self.cost != DEFAULT_COST:
            lines.append(f"cost={self.cost}")
        lines.append("enabled=1")
        lines.append("enabled_metadata=1")
        if self.priority != DEFAULT_PRIORITY:
            lines.append(f"priority={self.priority}")
        if self.module_hotfixes:
            lines.append("module_hotfixes=1")
        return "".join(f"{line}\n" for line in lines)


class RepositorySet:
    """
    All repositories enabled for one Copr project; they share one repo file.

    The project id can be set only once. Parts discovered later (dependencies,
    multilib variants, other sections of the same file) never replace it.
    """

    def __init__(self, parts: Iterable[RepositoryPart] = ()):
        self._id = ""
        self.parts: List[RepositoryPart] = []
        for part in parts:
            self.add_part(part)

    @property
    def id(self) -> str:
        return self._id

    @id.setter
    def id(self, value: str) -> None:
        if self._id or not value:
            return
        self._id = value

    def set_id_from_repo_id(self, repo_id: str) -> None:
        # copr:copr.fedorainfracloud.org:group_codescan:csutils => copr.fedorainfracloud.org/@codescan/csutils
        self.id = repo_id_to_project_id(repo_id)

    def add_part(self, part: RepositoryPart) -> bool:
        if any(existing.id == part.id for existing in self.parts):
            logger.warning(f"Repository '{part.id}' is listed twice, ignoring the duplicate.")
            return False
        self.parts.append(part)
        return True

    def add_local_part(self, repo_id: str, enabled: bool) -> None:
        self.set_id_from_repo_id(repo_id)
        self.add_part(RepositoryPart.from_local(repo_id, enabled))

    @property
    def enabled(self) -> bool:
        return any(part.enabled for part in self.parts)

    @property
    def has_external_deps(self) -> bool:
        return any(part.id.startswith(DEPENDENCY_ID_PREFIX) for part in self.parts)

    @property
    def multilib(self) -> bool:
        return any(MULTILIB_REPO_ID.match(part.id) for part in self.parts)

    def render(self) -> str:
        return "\n".join(part.render() for part in self.parts)


class EnvironmentConfig(BaseModel):
    """
    Immutable settings of the local system and the selected hub.
    """
    model_config = ConfigDict(frozen=True)

    distribution: str = Field(..., description="Distribution id, e.g. 'fedora'")
    release_version: str = Field(..., description="Distribution release, e.g. '39' or 'rawhide'")
    arch: str = Field(..., description="Base architecture of the system")
    hub: str = Field(..., description="Selected hub spec, a hostname or a configured alias")
    hub_hostname: str = Field(..., description="Hostname the hub spec resolves to")

    @computed_field
    @property
    def name_version(self) -> str:
        return f"{self.distribution}-{self.release_version}"
