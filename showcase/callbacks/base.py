"""Base callback protocol for showcase pipeline hooks.

Callbacks are called at key points of a pipeline run. Implement this protocol
to observe or instrument the pipeline without modifying core logic.

Usage:
    class MyCallback(BaseCallback):
        async def on_validation_complete(self, outcome, dialect, **kw):
            print(f"{dialect}: {len(outcome.errors)} error(s)")

    pipeline = StoryPipeline(..., callbacks=[MyCallback()])
"""

from typing import Any, Protocol, runtime_checkable

from showcase.types import ComponentRecord, Dialect, RuntimeCheckResult, ValidationOutcome


@runtime_checkable
class ShowcaseCallback(Protocol):
    """Protocol defining hooks for pipeline lifecycle events.

    All methods are async; the pipeline awaits each registered callback in order.
    """

    async def on_catalog_built(
        self,
        records: list[ComponentRecord],
        **kwargs: Any,
    ) -> None:
        """Called once a catalog has been built and de-duplicated."""
        ...

    async def on_validation_complete(
        self,
        outcome: ValidationOutcome,
        dialect: Dialect,
        **kwargs: Any,
    ) -> None:
        """Called after static validation (and any repairs) finishes."""
        ...

    async def on_repair_applied(
        self,
        repair_name: str,
        **kwargs: Any,
    ) -> None:
        """Called once per kept auto-repair."""
        ...

    async def on_runtime_check(
        self,
        result: RuntimeCheckResult,
        title: str,
        **kwargs: Any,
    ) -> None:
        """Called after runtime verification, including skipped runs."""
        ...

    async def on_error(
        self,
        error: Exception,
        context: dict[str, Any],
        **kwargs: Any,
    ) -> None:
        """Called when the writer or another collaborator raises."""
        ...


class BaseCallback:
    """Concrete base with no-op implementations of all hooks.

    Subclass this instead of implementing the Protocol directly
    to avoid implementing every method.
    """

    async def on_catalog_built(self, records: list[ComponentRecord], **kwargs: Any) -> None:
        pass

    async def on_validation_complete(
        self, outcome: ValidationOutcome, dialect: Dialect, **kwargs: Any
    ) -> None:
        pass

    async def on_repair_applied(self, repair_name: str, **kwargs: Any) -> None:
        pass

    async def on_runtime_check(
        self, result: RuntimeCheckResult, title: str, **kwargs: Any
    ) -> None:
        pass

    async def on_error(
        self, error: Exception, context: dict[str, Any], **kwargs: Any
    ) -> None:
        pass
