from __future__ import annotations

import logging

import pytest

from adstudio.application.pipeline.base import (
    BaseStep,
    PipelineContext,
    StepStatus,
    make_logging_middleware,
)
from adstudio.application.pipeline.factory import PipelineFactory


class _ReqKeysStep(BaseStep):
    name = "req_keys"
    required_keys = ["needed"]

    async def run(self, context: PipelineContext):  # pragma: no cover - not reached
        return "never"


class _SkipStep(BaseStep):
    name = "skip_me"

    def can_skip(self, context: PipelineContext) -> bool:
        return True

    async def run(self, context: PipelineContext):  # pragma: no cover - skipped
        return "skipped result"


class _PassStep(BaseStep):
    def __init__(self, name: str, record: list):
        self.name = name
        self.record = record

    async def run(self, context: PipelineContext):
        self.record.append(self.name)
        context.set(f"ran_{self.name}", True)
        return None


class _MatchStep(BaseStep):
    def __init__(self, name: str, value, record: list):
        self.name = name
        self.value = value
        self.record = record

    async def run(self, context: PipelineContext):
        self.record.append(self.name)
        return self.value


class _FailingStep(BaseStep):
    name = "always_fail"

    async def run(self, context: PipelineContext):
        raise ValueError("boom")


@pytest.mark.asyncio
async def test_required_keys_missing_raises():
    pipeline = PipelineFactory().add(_ReqKeysStep()).build()

    ctx = PipelineContext(input={})
    with pytest.raises(KeyError):
        await pipeline.execute(ctx)


@pytest.mark.asyncio
async def test_can_skip_sets_status_and_continues():
    order = []
    skip = _SkipStep()
    pipeline = PipelineFactory().add(skip).add(_MatchStep("m", 42, order)).build()

    result = await pipeline.execute(PipelineContext(input={}))

    assert skip.status == StepStatus.SKIPPED
    assert result["result"] == 42
    assert result["matched_step"] == "m"
    assert [s["status"] for s in result["steps"]] == ["skipped", "matched"]


@pytest.mark.asyncio
async def test_first_match_stops_remaining_steps():
    order = []
    pipeline = (
        PipelineFactory()
        .add(_PassStep("a", order))
        .add(_MatchStep("b", "winner", order))
        .add(_MatchStep("c", "loser", order))
        .build()
    )

    ctx = PipelineContext(input={})
    result = await pipeline.execute(ctx)

    assert result["result"] == "winner"
    assert result["matched_step"] == "b"
    assert order == ["a", "b"]
    assert ctx.get("ran_a") is True
    assert len(result["steps"]) == 2
    assert result["steps"][0]["status"] == StepStatus.PASSED.value
    assert result["context"] is ctx


@pytest.mark.asyncio
async def test_no_match_returns_none_result():
    order = []
    pipeline = PipelineFactory().extend([_PassStep("a", order), _PassStep("b", order)]).build()

    result = await pipeline.execute(PipelineContext(input={}))

    assert result["result"] is None
    assert result["matched_step"] is None
    assert order == ["a", "b"]


@pytest.mark.asyncio
async def test_failure_propagates_and_trace_is_kept():
    order = []
    failing = _FailingStep()
    pipeline = (
        PipelineFactory()
        .add(_PassStep("a", order))
        .add(failing)
        .add(_MatchStep("after", 1, order))
        .build()
    )

    ctx = PipelineContext(input={})
    with pytest.raises(ValueError, match="boom"):
        await pipeline.execute(ctx)

    assert failing.status == StepStatus.FAILED
    assert isinstance(failing.last_error, ValueError)
    assert order == ["a"]
    trace = ctx.get("_steps")
    assert [s["status"] for s in trace] == ["passed", "failed"]
    assert trace[1]["error"] == "boom"


@pytest.mark.asyncio
async def test_run_id_is_assigned_once():
    ctx = PipelineContext(input={})
    ctx.set_run_id("fixed-id")
    await PipelineFactory().add(_PassStep("a", [])).build().execute(ctx)
    assert ctx.get_run_id() == "fixed-id"

    fresh = PipelineContext(input={})
    await PipelineFactory().add(_PassStep("a", [])).build().execute(fresh)
    assert len(fresh.get_run_id()) == 12


@pytest.mark.asyncio
async def test_logging_middleware_preserves_result_and_attributes(caplog):
    order = []
    step = _MatchStep("m", "value", order)
    log = logging.getLogger("test.pipeline.middleware")
    pipeline = (
        PipelineFactory(middlewares=[make_logging_middleware(log)]).add(step).build()
    )

    with caplog.at_level(logging.DEBUG, logger="test.pipeline.middleware"):
        result = await pipeline.execute(PipelineContext(input={}))

    assert result["result"] == "value"
    # Wrapped step still exposes the inner name
    assert pipeline.steps[0].name == "m"
    assert result["steps"][0]["status"] == StepStatus.MATCHED.value
    messages = [r.getMessage() for r in caplog.records]
    assert any("Step m BEGIN" in m for m in messages)
    assert any("Step m END status=matched" in m for m in messages)


def test_context_artifacts():
    ctx = PipelineContext(input={"url": "x"})
    assert not ctx.has("a")
    assert ctx.get("a", "default") == "default"
    ctx.set("a", 1)
    assert ctx.has("a")
    assert ctx.get("a") == 1
    assert ctx.input["url"] == "x"
