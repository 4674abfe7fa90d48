"""
Conversions between the three identifier spaces of a Copr project:

- repo id:          copr:<hub>:<owner>:<project>[:ml]   (e.g. copr:copr.fedorainfracloud.org:group_copr:copr:suffix)
- copr id:          <hub>/<owner>/<project>             (e.g. copr.fedorainfracloud.org/@copr/copr:suffix)
- config filename:  _copr:<hub>:<owner>:<project>.repo
"""
import re
from typing import Optional, Tuple

from coprctl.domain.exceptions import MalformedProjectSpecException

REPO_ID_PREFIX = "copr:"
DEPENDENCY_ID_PREFIX = "coprdep:"
GROUP_MARKER = "@"
GROUP_STORAGE_PREFIX = "group_"
MULTILIB_SUFFIX = ":ml"

# [HUB/]OWNER/PROJECT, PROJECT may be a project directory like 'project:custom:123'
PROJECT_SPEC_PATTERN = re.compile(r"^(?:(?P<hub>[^/]+)/)?(?P<owner>[^/]+)/(?P<dirname>[^/]+)$")


def owner_to_storage_form(owner: str) -> str:
    """Group owners are stored as 'group_<name>' instead of '@<name>'."""
    if owner.startswith(GROUP_MARKER):
        return GROUP_STORAGE_PREFIX + owner[len(GROUP_MARKER):]
    return owner


def _owner_from_storage_form(owner: str) -> str:
    if owner.startswith(GROUP_STORAGE_PREFIX):
        return GROUP_MARKER + owner[len(GROUP_STORAGE_PREFIX):]
    return owner


def _strip_multilib_suffix(value: str) -> str:
    if value.endswith(MULTILIB_SUFFIX):
        return value[:-len(MULTILIB_SUFFIX)]
    return value


def repo_id_to_project_id(repo_id: str) -> str:
    """
    Converts a repo id into the Copr project id that can be enabled again.

    Only the first two colons after the 'copr:' prefix separate hub, owner
    and project; any further colons belong to the project directory.

    Returns:
        str: The project id, or an empty string when repo_id is not a Copr repository.
    """
    if not repo_id.startswith(REPO_ID_PREFIX):
        return ""

    hub, sep, remainder = repo_id[len(REPO_ID_PREFIX):].partition(":")
    if not sep:
        return _strip_multilib_suffix(hub)

    owner, sep, dirname = remainder.partition(":")
    segments = [hub, _owner_from_storage_form(owner)]
    if sep:
        segments.append(dirname)
    return _strip_multilib_suffix("/".join(segments))


def project_id_to_config_filename(project_id: str) -> str:
    """
    Converts a project id to the name of its repo file, e.g.
    copr.fedorainfracloud.org/@copr/copr-pull-requests:pr:2545 becomes
    _copr:copr.fedorainfracloud.org:group_copr:copr-pull-requests:pr:2545.repo
    """
    output = _strip_multilib_suffix(project_id)
    output = output.replace("/", ":")
    output = output.replace(GROUP_MARKER, GROUP_STORAGE_PREFIX)
    return f"_copr:{output}.repo"


def build_repo_id(hub_hostname: str, owner: str, dirname: str) -> str:
    return f"{REPO_ID_PREFIX}{hub_hostname}:{owner_to_storage_form(owner)}:{dirname}"


def multilib_repo_id(repo_id: str, index: int) -> str:
    """The first multilib repository gets ':ml', the following ones ':ml1', ':ml2', ..."""
    if index == 0:
        return repo_id + MULTILIB_SUFFIX
    return f"{repo_id}{MULTILIB_SUFFIX}{index}"


def project_name_from_dirname(dirname: str) -> str:
    return dirname.split(":", 1)[0]


def parse_project_spec(project_spec: str) -> Tuple[Optional[str], str, str]:
    """
    Splits OWNER/PROJECT or HUB/OWNER/PROJECT.

    Returns:
        Tuple of (hub or None, owner, project directory).
    """
    match = PROJECT_SPEC_PATTERN.match(project_spec)
    if not match:
        raise MalformedProjectSpecException(project_spec)
    return match.group("hub"), match.group("owner"), match.group("dirname")
