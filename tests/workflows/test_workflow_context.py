"""Tests for WorkflowContext — creation, accessors, in-place mutation."""

from __future__ import annotations

import pytest

from mu.config.models import Environment
from mu.core.errors import WorkflowError
from mu.workflows.context import WorkflowContext


class TestCreate:
    def test_minimal(self):
        ctx = WorkflowContext.create("environment-upsert")
        assert ctx.workflow_name == "environment-upsert"
        assert ctx.environment is None
        assert ctx.service_name == ""
        assert ctx.params == {}
        assert ctx.run_id

    def test_with_run_id_and_params(self):
        ctx = WorkflowContext.create("wf", run_id="custom", params={"VpcId": "vpc-1"})
        assert ctx.run_id == "custom"
        assert ctx.get_param("VpcId") == "vpc-1"

    def test_params_copied(self):
        source = {"k": "v"}
        ctx = WorkflowContext.create("wf", params=source)
        ctx.set_params({"k": "changed"})
        assert source == {"k": "v"}

    def test_unique_run_ids(self):
        assert WorkflowContext.create("wf").run_id != WorkflowContext.create("wf").run_id


class TestAccessors:
    def test_require_environment_unresolved(self):
        ctx = WorkflowContext.create("wf")
        assert ctx.has_environment is False
        with pytest.raises(WorkflowError, match="no resolved environment"):
            ctx.require_environment()

    def test_require_environment_resolved(self):
        ctx = WorkflowContext.create("wf")
        ctx.environment = Environment(name="dev")
        assert ctx.require_environment().name == "dev"

    def test_get_param_default(self):
        ctx = WorkflowContext.create("wf")
        assert ctx.get_param("missing") is None
        assert ctx.get_param("missing", "d") == "d"


class TestMutation:
    def test_set_params_overwrites(self):
        ctx = WorkflowContext.create("wf", params={"VpcId": "old", "Other": "x"})
        ctx.set_params({"VpcId": "new"})
        assert ctx.params == {"VpcId": "new", "Other": "x"}

    def test_to_dict(self):
        ctx = WorkflowContext.create("wf", run_id="r1", service_name="billing")
        ctx.environment = Environment(name="dev")
        d = ctx.to_dict()
        assert d["run_id"] == "r1"
        assert d["environment"] == "dev"
        assert d["service_name"] == "billing"
        assert d["params"] == {}
