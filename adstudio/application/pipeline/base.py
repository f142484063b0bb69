from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    Generic,
    List,
    Optional,
    Protocol,
    TypeVar,
    runtime_checkable,
    Mapping,
    Callable,
    ClassVar,
)
import logging
from abc import ABC, abstractmethod
from time import perf_counter
from enum import Enum
import uuid

T = TypeVar("T")


@dataclass(slots=True)
class PipelineContext:
    """Common pipeline context shared across all steps of one run.

    - input: immutable-like request input payload
    - artifacts: cross-step working data (also stores run-scoped technical
      info like run_id via reserved keys)
    """

    # Reserved artifact keys (not dataclass fields)
    RUN_ID_KEY: ClassVar[str] = "_run_id"

    input: Mapping[str, Any]
    artifacts: Dict[str, Any] = field(default_factory=dict)

    # ----- Artifacts: primary cross-step data store -----
    def set(self, key: str, value: Any) -> None:
        self.artifacts[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.artifacts.get(key, default)

    def has(self, key: str) -> bool:
        return key in self.artifacts

    # ----- Run ID (generic, stored in artifacts) -----
    def get_run_id(self) -> Optional[str]:
        return self.get(self.RUN_ID_KEY, None)

    def set_run_id(self, run_id: str) -> None:
        self.set(self.RUN_ID_KEY, run_id)

    def ensure_run_id(self, factory: Optional[Callable[[], str]] = None) -> str:
        rid = self.get_run_id()
        if not rid and factory:
            rid = factory()
        if not rid:
            rid = uuid.uuid4().hex[:12]
        self.set_run_id(rid)
        return rid


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    MATCHED = "matched"  # produced the pipeline result
    PASSED = "passed"  # completed without a result; next step runs
    SKIPPED = "skipped"
    FAILED = "failed"


@runtime_checkable
class Step(Protocol[T]):
    async def __call__(
        self, context: PipelineContext
    ) -> Optional[T]:  # pragma: no cover - protocol
        ...


logger = logging.getLogger(__name__)


class BaseStep(ABC, Generic[T]):
    """Base class for first-match pipeline steps with lifecycle hooks and status.

    ``run`` returns a result to end the pipeline, or None to hand over to the
    next step. Exceptions propagate to the pipeline caller.
    """

    name: str = "base_step"

    required_keys: List[str] = []

    # runtime fields
    status: StepStatus = StepStatus.PENDING
    last_error: Optional[Exception] = None
    duration: float = 0.0

    async def __call__(self, context: PipelineContext) -> Optional[T]:
        self.last_error = None

        if not self.validate_inputs(context):
            missing = [k for k in self.required_keys if not context.has(k)]
            raise KeyError(
                f"Missing required inputs for step '{self.name}': {', '.join(missing)}"
            )

        if self.can_skip(context):
            self.status = StepStatus.SKIPPED
            self.on_skip(context)
            return None

        self.status = StepStatus.RUNNING
        self.on_start(context)
        start = perf_counter()
        try:
            result = await self.run(context)
            self.status = StepStatus.MATCHED if result is not None else StepStatus.PASSED
            return result
        except Exception as e:  # noqa: BLE001
            self.last_error = e
            self.status = StepStatus.FAILED
            raise
        finally:
            self.duration = perf_counter() - start
            self.on_finish(context, self.duration)

    @abstractmethod
    async def run(
        self, context: PipelineContext
    ) -> Optional[T]:  # pragma: no cover - abstract
        ...

    # Hooks
    def on_start(self, context: PipelineContext) -> None:
        logger.debug("Step %s start", getattr(self, "name", self.__class__.__name__))

    def on_finish(self, context: PipelineContext, duration: float) -> None:
        logger.debug(
            "Step %s finished in %.3fs with status=%s run_id=%s",
            getattr(self, "name", self.__class__.__name__),
            duration,
            self.status.value,
            context.get_run_id(),
        )

    def on_skip(self, context: PipelineContext) -> None:
        logger.debug("Step %s skipped", getattr(self, "name", self.__class__.__name__))

    # Utilities
    def validate_inputs(self, context: PipelineContext) -> bool:
        if not self.required_keys:
            return True
        return all(context.has(k) for k in self.required_keys)

    def can_skip(self, context: PipelineContext) -> bool:
        return False


from typing import TypedDict


class StepResult(TypedDict):  # pragma: no cover - typing helper
    name: str
    status: str
    duration: float
    error: Optional[str]


class PipelineResult(TypedDict):  # pragma: no cover - typing helper
    result: Optional[Any]
    matched_step: Optional[str]
    duration: float
    steps: List[StepResult]
    context: PipelineContext


class Pipeline(Generic[T]):
    """Runs steps in order and stops at the first one that returns a result."""

    def __init__(self, steps: List[Step[T]]):
        self._steps = steps

    @property
    def steps(self) -> List[Step[T]]:
        return list(self._steps)

    async def execute(self, context: PipelineContext) -> PipelineResult:
        context.ensure_run_id()

        pipeline_start = perf_counter()
        results: Dict[str, Any] = {
            "result": None,
            "matched_step": None,
            "duration": 0.0,
            "steps": [],
        }

        try:
            for step in self._steps:
                step_name = getattr(step, "name", step.__class__.__name__)
                step_info: Dict[str, Any] = {
                    "name": step_name,
                    "status": StepStatus.PENDING.value,
                    "duration": 0.0,
                    "error": None,
                }
                results["steps"].append(step_info)

                step_start = perf_counter()
                try:
                    outcome = await step(context)
                    step_info["status"] = getattr(
                        step, "status", StepStatus.PASSED
                    ).value
                except Exception as e:  # noqa: BLE001
                    step_info["status"] = StepStatus.FAILED.value
                    step_info["error"] = str(e)
                    raise
                finally:
                    step_info["duration"] = perf_counter() - step_start

                if outcome is not None:
                    results["result"] = outcome
                    results["matched_step"] = step_name
                    break
        finally:
            results["duration"] = perf_counter() - pipeline_start
            # Keep the trace reachable even when a step raised
            context.set("_steps", results["steps"])

        results["context"] = context
        return results


class Middleware(Protocol):  # pragma: no cover - optional extension point
    def __call__(self, step: Step) -> Step: ...


def make_logging_middleware(
    logger_obj: logging.Logger | None = None,
    level_before: int = logging.DEBUG,
    level_after: int = logging.INFO,
) -> Middleware:
    """Return a middleware that logs before and after each step execution.

    Logs include: step name, run_id, status, duration and whether it matched.
    """
    _log = logger_obj or logger

    def _middleware(step: Step) -> Step:
        class _Wrapped:
            def __init__(self, inner: Step):
                self._inner = inner

            def __getattr__(self, item):  # delegate attributes like 'name'
                return getattr(self._inner, item)

            async def __call__(self, context: PipelineContext):
                step_name = getattr(self._inner, "name", self._inner.__class__.__name__)
                rid = context.get_run_id()
                _log.log(level_before, "[run_id=%s] Step %s BEGIN", rid, step_name)
                _start = perf_counter()
                try:
                    return await self._inner(context)
                finally:
                    duration = perf_counter() - _start
                    status = getattr(self._inner, "status", StepStatus.PENDING)
                    _log.log(
                        level_after,
                        "[run_id=%s] Step %s END status=%s duration=%.3fs",
                        rid,
                        step_name,
                        getattr(status, "value", str(status)),
                        duration,
                    )

        return _Wrapped(step)

    return _middleware
