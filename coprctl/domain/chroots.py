from typing import Collection, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict

from coprctl.domain.exceptions import ChrootNotFoundException

RELEASEVER = "$releasever"
BASEARCH = "$basearch"


class ChrootSelection(BaseModel):
    """
    Result of matching the local system against the chroots of a project.
    """
    model_config = ConfigDict(frozen=True)

    # Chroot segment of the baseurl, may contain $releasever/$basearch
    baseurl_chroot: str
    # Key into the descriptor's 'repos' mapping
    name_version: str
    arch: str
    explicit: bool = False


def repo_fallbacks(name_version: str) -> List[str]:
    """
    Name-version guesses tried in order when detecting the chroot.

    Only the configured name-version is tried; distributions that need
    different naming can set [main] distribution/releasever in copr.vendor.conf.
    """
    return [name_version]


def chroot_template(name_version: str) -> str:
    """
    fedora-39        => fedora-$releasever-$basearch
    fedora-eln       => fedora-eln-$basearch
    mageia-cauldron  => mageia-cauldron-$basearch
    epel-9           => epel-9-$basearch
    """
    if name_version == "fedora-eln":
        return f"{name_version}-{BASEARCH}"
    if name_version.startswith("fedora-"):
        return f"fedora-{RELEASEVER}-{BASEARCH}"
    if name_version.startswith("opensuse-leap-"):
        return f"opensuse-leap-{RELEASEVER}-{BASEARCH}"
    if name_version.startswith("mageia"):
        os_version = "cauldron" if name_version.endswith("cauldron") else RELEASEVER
        return f"mageia-{os_version}-{BASEARCH}"
    return f"{name_version}-{BASEARCH}"


def match_chroot_template(
    available_chroots: Collection[str], name_version: str, arch: str,
) -> Optional[Tuple[str, str]]:
    """
    Returns:
        Tuple of (baseurl chroot template, matched name-version), or None.
    """
    for guess in repo_fallbacks(name_version):
        if f"{guess}-{arch}" in available_chroots:
            return chroot_template(guess), guess
    return None


def split_chroot(chroot: str) -> Tuple[str, str]:
    """'epel-9-x86_64' => ('epel-9', 'x86_64')"""
    name_version, _, arch = chroot.rpartition("-")
    return name_version, arch


def resolve_chroot(
    available_chroots: Collection[str],
    name_version: str,
    arch: str,
    explicit_chroot: Optional[str] = None,
) -> ChrootSelection:
    if explicit_chroot:
        # No $releasever/$basearch expansion, the user may intentionally ask
        # for a different distribution or a cross-arch chroot.
        if explicit_chroot not in available_chroots:
            raise ChrootNotFoundException(available_chroots, explicit_chroot)
        selected_name_version, selected_arch = split_chroot(explicit_chroot)
        return ChrootSelection(
            baseurl_chroot=explicit_chroot,
            name_version=selected_name_version,
            arch=selected_arch,
            explicit=True,
        )

    match = match_chroot_template(available_chroots, name_version, arch)
    if match is None:
        raise ChrootNotFoundException(available_chroots, f"{name_version}-{arch}")

    template, matched_name_version = match
    return ChrootSelection(baseurl_chroot=template, name_version=matched_name_version, arch=arch)
