"""Tests for mu.cli — command smoke tests via CliRunner.

Commands run against the dry-run provider (``--dry-run``) or a provider
factory loaded from ``MU_STACK_PROVIDER``, so no backend is needed.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from mu import __version__
from mu.cli.app import app
from mu.cli.utils import resolve_factory_ref
from mu.stacks.dry_run import DryRunStackProvider

runner = CliRunner()

DRY_RUN_FACTORY = "mu.stacks.dry_run:DryRunStackProvider"


@pytest.fixture(autouse=True)
def mock_logging():
    """Keep the CLI callback from reconfiguring process-wide logging."""
    with patch("mu.cli.app.configure_logging") as configure:
        yield configure


def invoke(config_file, *args: str):
    return runner.invoke(app, ["--config", str(config_file), *args])


# ─── Root ────────────────────────────────────────────────────────────────


class TestRoot:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_log_level_option(self, config_file, mock_logging):
        result = invoke(config_file, "--log-level", "debug", "environment", "list")
        assert result.exit_code == 0
        assert mock_logging.call_args.kwargs["level"] == "DEBUG"

    def test_config_from_settings(self, config_file, monkeypatch):
        monkeypatch.setenv("MU_CONFIG_FILE", str(config_file))
        result = runner.invoke(app, ["environment", "list"])
        assert result.exit_code == 0
        assert "prod" in result.output


# ─── environment ─────────────────────────────────────────────────────────


class TestEnvironmentCLI:
    def test_list(self, config_file):
        result = invoke(config_file, "environment", "list")
        assert result.exit_code == 0
        assert "dev" in result.output
        assert "unmanaged" in result.output
        assert "vpc-0a1b2c" in result.output

    def test_list_missing_config(self, tmp_path):
        result = invoke(tmp_path / "absent.yml", "environment", "list")
        assert result.exit_code == 2
        assert "not found" in result.output

    def test_upsert_dry_run_prints_plan(self, config_file):
        result = invoke(config_file, "--dry-run", "environment", "upsert", "dev")
        assert result.exit_code == 0
        assert "Plan" in result.output
        assert "upsert_stack(mu-vpc-dev" in result.output
        assert "upsert_stack(mu-cluster-dev" in result.output

    def test_upsert_unknown_environment(self, config_file):
        result = invoke(config_file, "--dry-run", "environment", "upsert", "staging")
        assert result.exit_code == 1
        assert "Unable to find environment named 'staging'" in result.output

    def test_upsert_without_provider(self, config_file):
        result = invoke(config_file, "environment", "upsert", "dev")
        assert result.exit_code == 2
        assert "no stack provider configured" in result.output

    def test_upsert_with_provider_factory(self, config_file, monkeypatch):
        monkeypatch.setenv("MU_STACK_PROVIDER", DRY_RUN_FACTORY)
        result = invoke(config_file, "environment", "upsert", "dev")
        assert result.exit_code == 0

    def test_bad_provider_ref(self, config_file, monkeypatch):
        monkeypatch.setenv("MU_STACK_PROVIDER", "mu.stacks.dry_run:Nope")
        result = invoke(config_file, "environment", "upsert", "dev")
        assert result.exit_code == 2
        assert "cannot load stack provider" in result.output

    def test_terminate_dry_run_plans_deletes(self, config_file):
        result = invoke(config_file, "--dry-run", "environment", "terminate", "dev")
        assert result.exit_code == 0
        assert "delete_stack(mu-cluster-dev)" in result.output
        assert "delete_stack(mu-vpc-dev)" in result.output
        assert result.output.index("delete_stack(mu-cluster-dev)") < result.output.index(
            "delete_stack(mu-vpc-dev)"
        )

    def test_terminate_dry_run_unmanaged_network(self, config_file):
        result = invoke(config_file, "--dry-run", "environment", "terminate", "prod")
        assert result.exit_code == 0
        assert "delete_stack(mu-cluster-prod)" in result.output
        assert "await_final_status(mu-vpc-prod)" not in result.output

    def test_terminate_without_config_file(self, tmp_path):
        result = invoke(tmp_path / "absent.yml", "--dry-run", "environment", "terminate", "old")
        assert result.exit_code == 0
        assert "delete_stack(mu-vpc-old)" in result.output

    def test_terminate_empty_name(self, config_file):
        result = invoke(config_file, "--dry-run", "environment", "terminate", "")
        assert result.exit_code == 1
        assert "Stack name parts must be non-empty" in result.output


# ─── service ─────────────────────────────────────────────────────────────


class TestServiceCLI:
    def test_deploy_dry_run_plans_service_upsert(self, config_file):
        result = invoke(config_file, "--dry-run", "service", "deploy", "dev", "--tag", "v3")
        assert result.exit_code == 0
        assert "await_final_status(mu-cluster-dev)" in result.output
        assert "upsert_stack(mu-service-billing-dev" in result.output
        assert "EcsCluster=mu-cluster-dev-EcsCluster" in result.output
        assert "ImageUrl=registry.example.com/billing:v3" in result.output

    def test_deploy_requires_cluster(self, config_file, monkeypatch):
        monkeypatch.setenv("MU_STACK_PROVIDER", DRY_RUN_FACTORY)
        result = invoke(config_file, "service", "deploy", "dev")
        assert result.exit_code == 1
        assert "mu-cluster-dev" in result.output

    def test_deploy_with_scripted_provider(self, config_file):
        provider = DryRunStackProvider()
        with (
            patch("mu.cli.environment.load_provider", MagicMock(return_value=provider)),
            patch("mu.cli.service.load_provider", MagicMock(return_value=provider)),
        ):
            invoke(config_file, "--dry-run", "environment", "upsert", "dev")
            result = invoke(config_file, "--dry-run", "service", "deploy", "dev", "--tag", "v3")

        assert result.exit_code == 0
        service = provider.stacks["mu-service-billing-dev"]
        assert service.parameters["ImageUrl"] == "registry.example.com/billing:v3"

    def test_undeploy_with_service_override(self, config_file):
        result = invoke(config_file, "--dry-run", "service", "undeploy", "dev", "--service", "payments")
        assert result.exit_code == 0
        assert "delete_stack(mu-service-payments-dev)" in result.output


# ─── utils ───────────────────────────────────────────────────────────────


class TestResolveFactoryRef:
    def test_resolves(self):
        assert resolve_factory_ref(DRY_RUN_FACTORY) is DryRunStackProvider

    def test_missing_colon(self):
        with pytest.raises(ValueError):
            resolve_factory_ref("mu.stacks.dry_run")

    def test_non_callable(self):
        with pytest.raises(TypeError):
            resolve_factory_ref("mu.stacks.dry_run:PLACEHOLDER_IMAGE_ID")
