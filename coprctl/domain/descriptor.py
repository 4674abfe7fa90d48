from typing import Any, Dict, List, Optional, Set
from pydantic import BaseModel, ConfigDict, Field, model_validator


class RepoOptions(BaseModel):
    """
    Per-repository overrides published by the hub ('opts').
    Unknown keys are ignored, unset keys leave the repository defaults alone.
    """
    model_config = ConfigDict(extra="ignore", frozen=True)

    cost: Optional[int] = None
    priority: Optional[int] = None
    module_hotfixes: Optional[bool] = None
    id: Optional[str] = None
    name: Optional[str] = None


class MultilibDetail(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    opts: Optional[RepoOptions] = None


class ChrootDetail(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    opts: Optional[RepoOptions] = None
    # Insertion order is significant, it decides the :ml, :ml1, ... suffixes
    multilib: Dict[str, MultilibDetail] = Field(default_factory=dict)


class DistroRepos(BaseModel):
    """All architectures built for one distribution version."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    arch: Dict[str, ChrootDetail] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _accept_flat_arch_mapping(cls, data: Any) -> Any:
        # {"x86_64": {...}} is accepted as a shorthand for {"arch": {"x86_64": {...}}}
        if isinstance(data, dict) and "arch" not in data:
            return {"arch": data}
        return data


class DependencyDeclaration(BaseModel):
    """
    One entry of the descriptor's 'dependencies' list. 'data' stays untyped
    here because its shape depends on 'type'.
    """
    model_config = ConfigDict(extra="ignore", frozen=True)

    type: str
    data: Dict[str, Any] = Field(default_factory=dict)
    opts: Optional[RepoOptions] = None


class CoprDependencyData(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    owner: str
    projectname: str


class ExternalBaseurlData(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    pattern: str


class RepositoryDescriptor(BaseModel):
    """
    The JSON document a Copr hub publishes at /api_3/rpmrepo/<owner>/<dirname>/<name_version>/.
    """
    model_config = ConfigDict(extra="ignore", frozen=True)

    repos: Dict[str, DistroRepos] = Field(default_factory=dict)
    results_url: str
    dependencies: List[DependencyDeclaration] = Field(default_factory=list)

    def available_chroots(self) -> Set[str]:
        return {
            f"{name_version}-{arch}"
            for name_version, distro in self.repos.items()
            for arch in distro.arch
        }

    def chroot_detail(self, name_version: str, arch: str) -> ChrootDetail:
        return self.repos[name_version].arch[arch]
