"""Tests for the stack reconciler and undeployer.

Covers the await → upsert → await sequence, unmanaged bypass, output
propagation, post-upsert status decisions, provider error wrapping, and
the teardown path.
"""

from __future__ import annotations

from unittest.mock import MagicMock, call

import pytest

from mu.core.errors import MuError, StackFailedError, StackProviderError
from mu.stacks.models import StackStatus, StackType
from mu.stacks.protocols import StackDeleter, StackUpserter, StackWaiter
from mu.testing import RecordingStackProvider, assert_calls, make_stack
from mu.workflows.context import WorkflowContext
from mu.workflows.reconciler import StackStrategy, stack_undeployer, stack_upserter

NAME = "mu-cluster-dev"


def dev_naming(ctx: WorkflowContext) -> tuple[str, ...]:
    return ("dev",)


def strategy(**overrides) -> StackStrategy:
    defaults = dict(
        stack_type=StackType.CLUSTER,
        naming=dev_naming,
        parameters=lambda ctx, name: {"DesiredCapacity": "2"},
        outputs=lambda ctx, stack: dict(stack.outputs),
    )
    defaults.update(overrides)
    return StackStrategy(**defaults)


@pytest.fixture
def ctx() -> WorkflowContext:
    return WorkflowContext.create("test")


# ---------------------------------------------------------------------------
# Upsert
# ---------------------------------------------------------------------------


class TestStackUpserter:
    def test_create_sequence_and_outputs(self, ctx):
        provider = RecordingStackProvider(
            responses={NAME: [None, make_stack(NAME, outputs={"EcsCluster": "c-1"})]}
        )
        result = stack_upserter(ctx, strategy(), provider, provider)()

        assert result.is_ok()
        assert_calls(provider, [
            ("await_final_status", NAME),
            ("upsert_stack", NAME),
            ("await_final_status", NAME),
        ])
        assert provider.upserted_parameters(NAME) == {"DesiredCapacity": "2"}
        assert ctx.params == {"EcsCluster": "c-1"}

    def test_update_of_existing_stack(self, ctx):
        existing = make_stack(NAME, StackStatus.CREATE_COMPLETE)
        updated = make_stack(NAME, StackStatus.UPDATE_COMPLETE, outputs={"EcsCluster": "c-2"})
        provider = RecordingStackProvider(responses={NAME: [existing, updated]})

        assert stack_upserter(ctx, strategy(), provider, provider)().is_ok()
        assert len(provider.calls_to("upsert_stack")) == 1
        assert ctx.params["EcsCluster"] == "c-2"

    def test_repair_of_rolled_back_stack(self, ctx):
        provider = RecordingStackProvider(
            responses={NAME: [make_stack(NAME, StackStatus.ROLLBACK_COMPLETE), make_stack(NAME)]}
        )
        assert stack_upserter(ctx, strategy(), provider, provider)().is_ok()
        assert provider.methods().count("upsert_stack") == 1

    def test_tags_include_type_and_strategy_tags(self, ctx):
        provider = RecordingStackProvider(responses={NAME: [None, make_stack(NAME)]})
        stack_upserter(ctx, strategy(tags=lambda ctx: {"mu:environment": "dev"}), provider, provider)()
        assert provider.tags[NAME] == {"mu:type": "cluster", "mu:environment": "dev"}

    def test_body_is_bundled_template(self, ctx):
        provider = RecordingStackProvider(responses={NAME: [None, make_stack(NAME)]})
        stack_upserter(ctx, strategy(), provider, provider)()
        assert "AWS::ECS::Cluster" in provider.bodies[NAME]

    def test_custom_template(self, ctx):
        from io import StringIO

        provider = RecordingStackProvider(responses={NAME: [None, make_stack(NAME)]})
        stack_upserter(ctx, strategy(template=lambda: StringIO("custom")), provider, provider)()
        assert provider.bodies[NAME] == "custom"

    def test_order_with_separate_capabilities(self, ctx):
        manager = MagicMock()
        waiter = MagicMock(spec=StackWaiter)
        upserter = MagicMock(spec=StackUpserter)
        manager.attach_mock(waiter.await_final_status, "await_final_status")
        manager.attach_mock(upserter.upsert_stack, "upsert_stack")
        waiter.await_final_status.side_effect = [None, make_stack(NAME)]

        assert stack_upserter(ctx, strategy(), waiter, upserter)().is_ok()
        assert [c[0] for c in manager.mock_calls] == [
            "await_final_status",
            "upsert_stack",
            "await_final_status",
        ]
        waiter.await_final_status.assert_has_calls([call(NAME), call(NAME)])


class TestUnmanagedBypass:
    def test_no_provider_calls(self, ctx):
        waiter = MagicMock(spec=StackWaiter)
        upserter = MagicMock(spec=StackUpserter)
        bypass = strategy(unmanaged=lambda ctx: {"VpcId": "vpc-1", "PublicSubnetAZ1Id": "s-1"})

        assert stack_upserter(ctx, bypass, waiter, upserter)().is_ok()

        waiter.await_final_status.assert_not_called()
        upserter.upsert_stack.assert_not_called()
        assert ctx.params == {"VpcId": "vpc-1", "PublicSubnetAZ1Id": "s-1"}

    def test_none_means_managed(self, ctx):
        provider = RecordingStackProvider(responses={NAME: [None, make_stack(NAME)]})
        assert stack_upserter(ctx, strategy(unmanaged=lambda ctx: None), provider, provider)().is_ok()
        assert "upsert_stack" in provider.methods()


class TestPostUpsertStatus:
    @pytest.mark.parametrize(
        "status",
        [StackStatus.ROLLBACK_COMPLETE, StackStatus.UPDATE_ROLLBACK_COMPLETE, StackStatus.CREATE_FAILED],
    )
    def test_failed_terminal_status(self, ctx, status):
        provider = RecordingStackProvider(
            responses={NAME: [None, make_stack(NAME, status, reason="quota", outputs={"X": "1"})]}
        )
        result = stack_upserter(ctx, strategy(), provider, provider)()

        assert isinstance(result.error, StackFailedError)
        assert result.error.status == status.value
        assert result.error.reason == "quota"
        assert ctx.params == {}

    def test_absent_after_upsert(self, ctx):
        provider = RecordingStackProvider()
        result = stack_upserter(ctx, strategy(), provider, provider)()
        assert isinstance(result.error, StackFailedError)
        assert result.error.status is None


class TestProviderErrors:
    def test_await_failure_is_wrapped(self, ctx):
        cause = ConnectionError("throttled")
        provider = RecordingStackProvider(fail_on={"await_final_status": cause})
        result = stack_upserter(ctx, strategy(), provider, provider)()

        assert isinstance(result.error, StackProviderError)
        assert result.error.stack_name == NAME
        assert result.error.operation == "await"
        assert result.error.cause is cause
        assert provider.methods() == ["await_final_status"]

    def test_upsert_failure_is_wrapped(self, ctx):
        provider = RecordingStackProvider(fail_on={"upsert_stack": RuntimeError("denied")})
        result = stack_upserter(ctx, strategy(), provider, provider)()
        assert isinstance(result.error, StackProviderError)
        assert result.error.operation == "upsert"
        assert provider.methods() == ["await_final_status", "upsert_stack"]

    def test_provider_retryability_carried_over(self, ctx):
        class Throttled(Exception):
            retryable = True

        provider = RecordingStackProvider(fail_on={"upsert_stack": Throttled("slow down")})
        result = stack_upserter(ctx, strategy(), provider, provider)()
        assert result.error.retryable is True

    def test_not_retryable_by_default(self, ctx):
        provider = RecordingStackProvider(
            responses={NAME: [make_stack(NAME)]},
            fail_on={"delete_stack": RuntimeError("denied")},
        )
        result = stack_undeployer(ctx, StackType.CLUSTER, dev_naming, provider, provider)()
        assert isinstance(result.error, StackProviderError)
        assert result.error.retryable is False

    def test_mu_errors_pass_through_unwrapped(self, ctx):
        error = MuError("already typed")
        provider = RecordingStackProvider(fail_on={"upsert_stack": error})
        assert stack_upserter(ctx, strategy(), provider, provider)().error is error

    def test_parameter_failure_stops_before_upsert(self, ctx):
        def parameters(ctx, name):
            raise MuError("no image")

        provider = RecordingStackProvider()
        result = stack_upserter(ctx, strategy(parameters=parameters), provider, provider)()
        assert str(result.error) == "no image"
        assert "upsert_stack" not in provider.methods()


# ---------------------------------------------------------------------------
# Undeploy
# ---------------------------------------------------------------------------


class TestStackUndeployer:
    def test_absent_stack_makes_no_delete(self, ctx):
        deleter = MagicMock(spec=StackDeleter)
        waiter = MagicMock(spec=StackWaiter)
        waiter.await_final_status.return_value = None

        result = stack_undeployer(ctx, StackType.CLUSTER, dev_naming, deleter, waiter)()

        assert result.is_ok()
        deleter.delete_stack.assert_not_called()
        waiter.await_final_status.assert_called_once_with(NAME)

    def test_already_deleted_status_counts_as_absent(self, ctx):
        provider = RecordingStackProvider(
            responses={NAME: [make_stack(NAME, StackStatus.DELETE_COMPLETE)]}
        )
        assert stack_undeployer(ctx, StackType.CLUSTER, dev_naming, provider, provider)().is_ok()
        assert provider.calls_to("delete_stack") == []

    def test_delete_sequence(self, ctx):
        provider = RecordingStackProvider(responses={NAME: [make_stack(NAME), None]})
        result = stack_undeployer(ctx, StackType.CLUSTER, dev_naming, provider, provider)()

        assert result.is_ok()
        assert_calls(provider, [
            ("await_final_status", NAME),
            ("delete_stack", NAME),
            ("await_final_status", NAME),
        ])

    def test_delete_failed(self, ctx):
        provider = RecordingStackProvider(
            responses={NAME: [make_stack(NAME), make_stack(NAME, StackStatus.DELETE_FAILED)]}
        )
        result = stack_undeployer(ctx, StackType.CLUSTER, dev_naming, provider, provider)()
        assert isinstance(result.error, StackFailedError)
        assert result.error.status == "DELETE_FAILED"

    def test_delete_error_is_wrapped(self, ctx):
        provider = RecordingStackProvider(
            responses={NAME: [make_stack(NAME)]},
            fail_on={"delete_stack": RuntimeError("in use")},
        )
        result = stack_undeployer(ctx, StackType.CLUSTER, dev_naming, provider, provider)()
        assert isinstance(result.error, StackProviderError)
        assert result.error.operation == "delete"

    def test_unmanaged_skips_everything(self, ctx):
        deleter = MagicMock(spec=StackDeleter)
        waiter = MagicMock(spec=StackWaiter)
        result = stack_undeployer(
            ctx, StackType.VPC, dev_naming, deleter, waiter, unmanaged=lambda ctx: True
        )()
        assert result.is_ok()
        waiter.await_final_status.assert_not_called()
        deleter.delete_stack.assert_not_called()

    def test_step_name(self, ctx):
        step = stack_undeployer(ctx, StackType.VPC, dev_naming, MagicMock(), MagicMock())
        assert step.name == "undeploy:vpc"
