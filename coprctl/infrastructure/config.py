import configparser
import logging
import os
import platform
from pathlib import Path
from typing import Dict, List, Optional

from coprctl.domain.exceptions import ConfigMissingException
from coprctl.domain.models import EnvironmentConfig

logger = logging.getLogger(__name__)

DEFAULT_COPR_HUB = "copr.fedorainfracloud.org"
DEFAULT_CONFIG_DIR = "/etc/dnf/plugins"
DEFAULT_REPOS_DIR = "/etc/yum.repos.d"
DEFAULT_PROTOCOL = "https"
MAIN_SECTION = "main"


def detect_os_release() -> Dict[str, str]:
    try:
        return platform.freedesktop_os_release()
    except OSError as e:
        logger.warning(f"Unable to read os-release: {e}")
        return {}


def detect_arch() -> str:
    return platform.machine()


class CoprConfig:
    """
    Layered view of copr.vendor.conf, copr.conf and copr.d/*.conf.
    Files read later override earlier ones key by key.
    """

    def __init__(self) -> None:
        self.parser = configparser.ConfigParser(interpolation=None)

    @classmethod
    def load(cls, config_dir: str = DEFAULT_CONFIG_DIR) -> "CoprConfig":
        config = cls()
        for path in cls.config_files(Path(config_dir)):
            try:
                config.load_file(path)
            except ConfigMissingException as e:
                logger.debug(f"{e}, skipping.")
        return config

    @staticmethod
    def config_files(config_dir: Path) -> List[Path]:
        files = [config_dir / "copr.vendor.conf", config_dir / "copr.conf"]
        files.extend(sorted((config_dir / "copr.d").glob("*.conf")))
        return files

    def load_file(self, path: Path) -> None:
        if not path.is_file():
            raise ConfigMissingException(str(path))
        logger.debug(f"Loading configuration {path}")
        self.parser.read(path)

    def get(self, section: str, option: str) -> Optional[str]:
        if not self.parser.has_option(section, option):
            return None
        return self.parser.get(section, option)

    def get_hub_hostname(self, hubspec: str) -> str:
        """A hub spec is either a hostname or the name of a section defining one."""
        return self.get(hubspec, "hostname") or hubspec

    def get_hub_url(self, hubspec: str) -> str:
        protocol = self.get(hubspec, "protocol") or DEFAULT_PROTOCOL
        port = self.get(hubspec, "port")
        port_suffix = f":{port}" if port else ""
        return f"{protocol}://{self.get_hub_hostname(hubspec)}{port_suffix}"

    def environment(
        self,
        hubspec: str,
        os_release: Optional[Dict[str, str]] = None,
        arch: Optional[str] = None,
    ) -> EnvironmentConfig:
        """
        Resolves the local system settings. Values from the configuration files
        win, the detected os-release values are only used for missing keys.
        """
        # Distributions the detection does not fit can set these in copr.vendor.conf:
        #
        #   [main]
        #   distribution = abc
        #   releasever = xyz
        #   arch = armv7hl
        distribution = self.get(MAIN_SECTION, "distribution")
        release_version = self.get(MAIN_SECTION, "releasever")
        if distribution is None or release_version is None:
            if os_release is None:
                os_release = detect_os_release()
            if distribution is None:
                distribution = os_release.get("ID", "linux")
            if release_version is None:
                release_version = os_release.get("VERSION_ID", "")

        return EnvironmentConfig(
            distribution=distribution,
            release_version=release_version,
            arch=arch or self.get(MAIN_SECTION, "arch") or detect_arch(),
            hub=hubspec,
            hub_hostname=self.get_hub_hostname(hubspec),
        )


def config_dir_from_env() -> str:
    return os.getenv("COPR_CONFIG_DIR", DEFAULT_CONFIG_DIR)


def repos_dir_from_env() -> str:
    return os.getenv("COPR_REPOS_DIR", DEFAULT_REPOS_DIR)


def hub_from_env() -> str:
    return os.getenv("COPR_HUB") or DEFAULT_COPR_HUB
