"""Tests for provisioning models and agent ID generation."""

import random

from pydantic import ValidationError
import pytest

from nanda_provisioner.models import (
    GITHUB_REPO,
    GroupVars,
    ProvisionConfig,
    generate_agent_id,
)


class TestGenerateAgentID:
    def test_always_six_digits(self):
        rng = random.Random(1234)
        for _ in range(1000):
            agent_id = generate_agent_id(rng)
            assert 100000 <= agent_id <= 999999

    def test_without_rng_is_six_digits(self):
        assert 100000 <= generate_agent_id() <= 999999

    def test_seeded_rng_is_deterministic(self):
        assert generate_agent_id(random.Random(42)) == generate_agent_id(random.Random(42))

    def test_does_not_touch_global_random_state(self):
        random.seed(7)
        expected = random.random()

        random.seed(7)
        generate_agent_id()
        assert random.random() == expected


class TestProvisionConfig:
    def test_explicit_agent_id_is_kept(self, config):
        assert config.domain == "test.example.com"
        assert config.agent_id == 123456
        assert config.num_agents == 2
        assert config.registry_url == "https://test-registry.com:6900"

    def test_zero_agent_id_is_generated(self):
        config = ProvisionConfig.create(
            domain="test.example.com",
            num_agents=1,
            registry_url="https://test-registry.com:6900",
            agent_id=0,
        )

        assert config.agent_id != 0
        assert 100000 <= config.agent_id <= 999999

    def test_generated_agent_id_uses_given_rng(self):
        expected = generate_agent_id(random.Random(99))

        config = ProvisionConfig.create(
            domain="test.example.com",
            num_agents=1,
            registry_url="https://test-registry.com:6900",
            rng=random.Random(99),
        )

        assert config.agent_id == expected

    def test_negative_agent_id_rejected(self):
        with pytest.raises(ValueError, match="agent_id"):
            ProvisionConfig.create("test.example.com", 1, "https://r", agent_id=-5)

    @pytest.mark.parametrize("domain", ["", "   "])
    def test_empty_domain_rejected(self, domain):
        with pytest.raises(ValidationError):
            ProvisionConfig.create(domain, 1, "https://r", agent_id=123456)

    @pytest.mark.parametrize(
        "domain", ["a.example.com\nevil=1", "a example.com", "a.example.com\x00"]
    )
    def test_multiline_or_spaced_domain_rejected(self, domain):
        with pytest.raises(ValidationError):
            ProvisionConfig.create(domain, 1, "https://r", agent_id=123456)

    def test_registry_url_with_newline_rejected(self):
        with pytest.raises(ValidationError):
            ProvisionConfig.create("a.example.com", 1, "https://r\n[extra]", agent_id=123456)

    def test_zero_agents_rejected(self):
        with pytest.raises(ValidationError):
            ProvisionConfig.create("test.example.com", 0, "https://r", agent_id=123456)

    def test_is_immutable(self, config):
        with pytest.raises(ValidationError):
            config.agent_id = 654321


class TestGroupVars:
    def test_github_repo_defaults_to_upstream(self):
        group_vars = GroupVars(
            anthropic_api_key="a",
            smithery_api_key="s",
            domain_name="test.example.com",
            agent_id_prefix=123456,
            num_agents=1,
            registry_url="https://r",
        )

        assert group_vars.github_repo == GITHUB_REPO

    def test_github_repo_cannot_be_overridden(self):
        with pytest.raises(ValidationError):
            GroupVars(
                anthropic_api_key="a",
                smithery_api_key="s",
                domain_name="test.example.com",
                agent_id_prefix=123456,
                github_repo="https://github.com/someone/fork.git",
                num_agents=1,
                registry_url="https://r",
            )
