import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from coprctl.main import cli


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        self.config_dir = root / "plugins"
        self.repos_dir = root / "yum.repos.d"
        self.config_dir.mkdir()
        self.repos_dir.mkdir()
        (self.config_dir / "copr.conf").write_text(
            "[main]\ndistribution = fedora\nreleasever = 39\n\n"
            "[fedora]\nhostname = copr.fedorainfracloud.org\n"
        )
        self.env = {
            "COPR_CONFIG_DIR": str(self.config_dir),
            "COPR_REPOS_DIR": str(self.repos_dir),
            "COPR_HUB": "",
        }
        self.runner = CliRunner()
        arch_patcher = patch("coprctl.infrastructure.config.detect_arch", return_value="x86_64")
        arch_patcher.start()
        self.addCleanup(arch_patcher.stop)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_debug_prints_settings(self) -> None:
        result = self.runner.invoke(cli, ["--hub", "fedora", "debug"], env=self.env)

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("hubspec: fedora\n", result.output)
        self.assertIn("hub_hostname: copr.fedorainfracloud.org\n", result.output)
        self.assertIn("name_version: fedora-39\n", result.output)
        self.assertIn("arch: x86_64\n", result.output)
        self.assertIn("  - fedora-39\n", result.output)

    def test_enable_rejects_malformed_project_spec(self) -> None:
        result = self.runner.invoke(cli, ["enable", "just-a-project"], env=self.env)

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Invalid PROJECT_SPEC format 'just-a-project'", result.output)
        self.assertEqual(list(self.repos_dir.iterdir()), [])

    def test_enable_writes_repo_file(self) -> None:
        descriptor = {
            "repos": {"fedora-39": {"arch": {"x86_64": {}}}},
            "results_url": "https://download.copr.fedorainfracloud.org/results",
            "dependencies": [],
        }
        with patch(
            "coprctl.infrastructure.copr_client.CoprClient.fetch_descriptor",
            new_callable=AsyncMock,
            return_value=descriptor,
        ) as fetch:
            result = self.runner.invoke(cli, ["enable", "fedora/@copr/copr-dev"], env=self.env)

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(fetch.call_args.args[1:], ("@copr", "copr-dev", "fedora-39"))
        path = self.repos_dir / "_copr:copr.fedorainfracloud.org:group_copr:copr-dev.repo"
        self.assertIn(
            "baseurl=https://download.copr.fedorainfracloud.org/results/@copr/copr-dev/fedora-$releasever-$basearch/\n",
            path.read_text(),
        )

    def test_enable_reports_missing_chroot(self) -> None:
        descriptor = {"repos": {"epel-9": {"arch": {"x86_64": {}}}}, "results_url": "https://results"}
        with patch(
            "coprctl.infrastructure.copr_client.CoprClient.fetch_descriptor",
            new_callable=AsyncMock,
            return_value=descriptor,
        ):
            result = self.runner.invoke(cli, ["enable", "owner/project"], env=self.env)

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Chroot not found in the given Copr project (fedora-39-x86_64)", result.output)
        self.assertIn(" epel-9-x86_64", result.output)

    def test_list_marks_disabled_projects(self) -> None:
        (self.repos_dir / "_copr:copr.fedorainfracloud.org:owner:on.repo").write_text(
            "[copr:copr.fedorainfracloud.org:owner:on]\nenabled=1\n"
        )
        (self.repos_dir / "_copr:copr.fedorainfracloud.org:owner:off.repo").write_text(
            "[copr:copr.fedorainfracloud.org:owner:off]\nenabled=0\n"
        )

        result = self.runner.invoke(cli, ["list"], env=self.env)

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(
            result.output.splitlines(),
            ["copr.fedorainfracloud.org/owner/off (disabled)", "copr.fedorainfracloud.org/owner/on"],
        )
