import re
from typing import Any, Dict
from pydantic import ValidationError

from coprctl.domain.descriptor import (
    CoprDependencyData,
    DependencyDeclaration,
    ExternalBaseurlData,
    RepositoryDescriptor,
)
from coprctl.domain.exceptions import DescriptorParseException, UnrecognizedDependencyTypeException
from coprctl.domain.identifiers import DEPENDENCY_ID_PREFIX, owner_to_storage_form
from coprctl.domain.models import RepositoryPart

CHROOT_PLACEHOLDER = "$chroot"


def copr_gpg_key_url(results_url: str, owner: str, project_name: str) -> str:
    return f"{results_url}/{owner}/{project_name}/pubkey.gpg"


def copr_base_url(results_url: str, owner: str, dirname: str, chroot: str) -> str:
    return f"{results_url}/{owner}/{dirname}/{chroot}/"


class CoprTranslator:
    """
    Anti-corruption layer that translates raw Copr API JSON into descriptor models and repository parts.
    """

    @staticmethod
    def to_descriptor(raw: Dict[str, Any]) -> RepositoryDescriptor:
        """
        Validates the raw rpmrepo JSON once, so the rest of the code works with typed fields.

        Raises:
            DescriptorParseException: if the JSON does not have the expected shape.
        """
        try:
            return RepositoryDescriptor.model_validate(raw)
        except ValidationError as e:
            raise DescriptorParseException(f"Unexpected repository descriptor: {e}") from e

    @staticmethod
    def to_dependency_part(
        dependency: DependencyDeclaration,
        results_url: str,
        chroot: str,
        hub_hostname: str,
    ) -> RepositoryPart:
        """
        Builds the repository for one runtime dependency of the project.

        Args:
            dependency: One entry of the descriptor's 'dependencies' list.
            results_url: Base URL of the hub's build results.
            chroot: Resolved chroot segment, possibly with $releasever/$basearch.
            hub_hostname: Hostname of the hub, used for default ids of Copr dependencies.

        Raises:
            UnrecognizedDependencyTypeException: for dependency types other than 'copr' and 'external_baseurl'.
            DescriptorParseException: if 'data' lacks the fields its type requires.
        """
        try:
            if dependency.type == "copr":
                data = CoprDependencyData.model_validate(dependency.data)
                part = RepositoryPart(
                    id=f"{DEPENDENCY_ID_PREFIX}{hub_hostname}:{owner_to_storage_form(data.owner)}:{data.projectname}",
                    name=f"Copr {hub_hostname}/{data.owner}/{data.projectname} external runtime dependency",
                    base_url=copr_base_url(results_url, data.owner, data.projectname, chroot),
                    gpg_key_url=copr_gpg_key_url(results_url, data.owner, data.projectname),
                )
            elif dependency.type == "external_baseurl":
                data = ExternalBaseurlData.model_validate(dependency.data)
                base_url = data.pattern.replace(CHROOT_PLACEHOLDER, chroot)
                part = RepositoryPart(
                    id=DEPENDENCY_ID_PREFIX + re.sub(r"[^a-zA-Z0-9]", "_", base_url),
                    name=f"Copr external runtime dependency {base_url}",
                    base_url=base_url,
                )
            else:
                raise UnrecognizedDependencyTypeException(dependency.type)
        except ValidationError as e:
            raise DescriptorParseException(f"Malformed '{dependency.type}' dependency: {e}") from e

        part.apply_options(dependency.opts)
        return part
