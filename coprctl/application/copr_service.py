import logging
from pathlib import Path
from typing import List, Optional
import aiohttp

from coprctl.domain.chroots import BASEARCH, ChrootSelection, repo_fallbacks, resolve_chroot
from coprctl.domain.descriptor import RepositoryDescriptor
from coprctl.domain.exceptions import CoprException, UnrecognizedDependencyTypeException
from coprctl.domain.identifiers import build_repo_id, multilib_repo_id, project_name_from_dirname
from coprctl.domain.models import EnvironmentConfig, RepositoryPart, RepositorySet
from coprctl.infrastructure.acl import CoprTranslator, copr_base_url, copr_gpg_key_url
from coprctl.infrastructure.copr_client import CoprClient
from coprctl.infrastructure.repo_files import RepoFileStore

logger = logging.getLogger(__name__)


class CoprService:
    """
    Service responsible for enabling Copr projects: it fetches the project's
    repository descriptor, matches it against the local system and writes the
    resulting repo file.

    Every step runs once; any failure aborts before the repo file is touched.
    """

    def __init__(
            self,
            copr_client: CoprClient,
            repo_store: RepoFileStore,
            environment: EnvironmentConfig,
    ):
        self.copr_client = copr_client
        self.repo_store = repo_store
        self.environment = environment

    async def fetch_descriptor(self, owner: str, dirname: str) -> RepositoryDescriptor:
        async with aiohttp.ClientSession() as session:
            raw = await self.copr_client.fetch_descriptor(
                session, owner, dirname, self.environment.name_version,
            )
        return CoprTranslator.to_descriptor(raw)

    async def build_repository_set(
        self, owner: str, dirname: str, chroot: Optional[str] = None,
    ) -> RepositorySet:
        descriptor = await self.fetch_descriptor(owner, dirname)
        selection = resolve_chroot(
            descriptor.available_chroots(),
            self.environment.name_version,
            self.environment.arch,
            chroot,
        )
        logger.debug(f"Selected chroot '{selection.baseurl_chroot}' for {owner}/{dirname}")
        return self.expand(descriptor, selection, owner, dirname)

    def expand(
        self,
        descriptor: RepositoryDescriptor,
        selection: ChrootSelection,
        owner: str,
        dirname: str,
    ) -> RepositorySet:
        """
        Builds the main repository, its multilib variants and its dependencies.
        """
        results_url = descriptor.results_url
        repo_id = build_repo_id(self.environment.hub_hostname, owner, dirname)
        name = f"Copr repo for {dirname} owned by {owner}"
        gpg_key_url = copr_gpg_key_url(results_url, owner, project_name_from_dirname(dirname))
        detail = descriptor.chroot_detail(selection.name_version, selection.arch)

        repository_set = RepositorySet()
        repository_set.set_id_from_repo_id(repo_id)

        main_part = RepositoryPart(
            id=repo_id,
            name=name,
            base_url=copr_base_url(results_url, owner, dirname, selection.baseurl_chroot),
            gpg_key_url=gpg_key_url,
        )
        main_part.apply_options(detail.opts)
        repository_set.add_part(main_part)

        # An explicitly requested chroot is enabled alone
        if not selection.explicit:
            for index, (ml_arch, ml_detail) in enumerate(detail.multilib.items()):
                multilib_chroot = selection.baseurl_chroot.replace(BASEARCH, ml_arch)
                ml_id = multilib_repo_id(repo_id, index)
                ml_part = RepositoryPart(
                    name=f"{name} ({ml_arch})",
                    base_url=copr_base_url(results_url, owner, dirname, multilib_chroot),
                    gpg_key_url=gpg_key_url,
                )
                ml_part.apply_options(detail.opts)
                # Only the multilib opts may override the :ml id
                ml_part.id = ml_id
                ml_part.apply_options(ml_detail.opts)
                repository_set.add_part(ml_part)

        for dependency in descriptor.dependencies:
            try:
                part = CoprTranslator.to_dependency_part(
                    dependency, results_url, selection.baseurl_chroot, self.environment.hub_hostname,
                )
            except UnrecognizedDependencyTypeException as e:
                logger.debug(f"{e}, skipping.")
                continue
            repository_set.add_part(part)

        return repository_set

    async def enable(self, owner: str, dirname: str, chroot: Optional[str] = None) -> Path:
        repository_set = await self.build_repository_set(owner, dirname, chroot)
        path = self.repo_store.save(repository_set)
        logger.info(
            f"Enabled {repository_set.id} ({len(repository_set.parts)} repositories, "
            f"multilib: {repository_set.multilib}, external deps: {repository_set.has_external_deps})."
        )
        return path

    def list_repositories(
        self, installed_only: bool = True, hub_hostname: Optional[str] = None,
    ) -> List[RepositorySet]:
        """
        Returns the Copr projects with a repo file on this system, optionally
        only those of one hub.
        """
        if not installed_only:
            raise CoprException("Listing projects available on the hub is not supported, use --installed.")
        repository_sets = self.repo_store.installed_sets()
        if hub_hostname:
            repository_sets = [s for s in repository_sets if s.id.startswith(f"{hub_hostname}/")]
        return repository_sets

    def debug_lines(self) -> List[str]:
        env = self.environment
        lines = [
            f"hubspec: {env.hub}",
            f"hub_hostname: {env.hub_hostname}",
            f"name_version: {env.name_version}",
            f"arch: {env.arch}",
            "repo_fallback_priority:",
        ]
        lines.extend(f"  - {item}" for item in repo_fallbacks(env.name_version))
        return lines
