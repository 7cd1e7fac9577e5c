import stat

import pytest
import yaml

from nanda_provisioner.exceptions import FilesystemError
from nanda_provisioner.models import GITHUB_REPO, ProvisionConfig
from nanda_provisioner.provisioner.artifacts import (
    build_group_vars,
    write_group_vars,
    write_inventory,
)


class TestInventory:
    def test_inventory_content(self, config, tmp_path):
        path = write_inventory(config, "203.0.113.5", tmp_path)

        assert path == tmp_path / "ioa_inventory.ini"
        assert path.read_text() == (
            "[servers]\n"
            "server ansible_host=203.0.113.5\n"
            "\n"
            "[all:vars]\n"
            "ansible_user=root\n"
            "ansible_connection=local\n"
            "domain_name=test.example.com\n"
            "agent_id_prefix=123456\n"
            f"github_repo={GITHUB_REPO}\n"
            "registry_url=https://test-registry.com:6900\n"
        )

    def test_missing_work_dir_raises(self, config, tmp_path):
        with pytest.raises(FilesystemError, match="failed to write inventory file"):
            write_inventory(config, "203.0.113.5", tmp_path / "does-not-exist")


class TestGroupVars:
    def test_group_vars_document(self, config, tmp_path):
        group_vars = build_group_vars(config, "sk-ant-test", "smithery-test")

        path = write_group_vars(group_vars, tmp_path)

        assert path == tmp_path / "group_vars" / "all.yml"
        data = yaml.safe_load(path.read_text())
        assert data == {
            "anthropic_api_key": "sk-ant-test",
            "smithery_api_key": "smithery-test",
            "domain_name": "test.example.com",
            "agent_id_prefix": 123456,
            "github_repo": GITHUB_REPO,
            "num_agents": 2,
            "registry_url": "https://test-registry.com:6900",
        }
        assert list(data) == [
            "anthropic_api_key",
            "smithery_api_key",
            "domain_name",
            "agent_id_prefix",
            "github_repo",
            "num_agents",
            "registry_url",
        ]

    @pytest.mark.parametrize(
        "domain,registry_url",
        [
            ("a.example.org", "https://other-registry:443"),
            ("agents.internal", "http://localhost:6900"),
        ],
    )
    def test_github_repo_is_always_upstream(self, tmp_path, domain, registry_url):
        config = ProvisionConfig.create(domain, 3, registry_url, agent_id=654321)

        path = write_group_vars(build_group_vars(config, "a", "s"), tmp_path)

        assert yaml.safe_load(path.read_text())["github_repo"] == GITHUB_REPO

    def test_group_vars_file_is_owner_only(self, config, tmp_path):
        path = write_group_vars(build_group_vars(config, "a", "s"), tmp_path)

        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_work_dir_is_a_file(self, config, tmp_path):
        not_a_dir = tmp_path / "file"
        not_a_dir.write_text("")

        with pytest.raises(FilesystemError, match="group_vars directory"):
            write_group_vars(build_group_vars(config, "a", "s"), not_a_dir)
