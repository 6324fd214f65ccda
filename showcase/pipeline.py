"""Story pipeline. Wires extraction, validation, writing and runtime verification.

    extract → validate (+ repair) → write → verify

Nothing here raises for a bad response: every failure comes back as a
PipelineResult naming the stage that stopped the run, with regeneration
feedback text for the caller's next LLM attempt.
"""

import asyncio
import logging
from typing import Any, Callable, Optional, Union

from showcase.catalog.builder import ComponentCatalog
from showcase.catalog.oracle import NameOracle
from showcase.config import ProjectConfig, settings
from showcase.runtime.verifier import RuntimeVerifier
from showcase.types import Dialect, PipelineResult, PipelineStage
from showcase.validation.extract import extract_artifact
from showcase.validation.feedback import format_runtime_feedback, format_validation_feedback
from showcase.validation.validator import CatalogLike, StoryValidator

logger = logging.getLogger(__name__)

# Receives the final story text; may be sync or async; may return where it wrote.
Writer = Callable[[str], Any]

NO_CODE_FEEDBACK = (
    "No story code was found in the response. Return the complete story file "
    "in a single fenced code block."
)


class StoryPipeline:
    """Single entry point for turning one LLM response into an accepted story.

    Constructor dependencies (all injectable):
        - catalog: components the story may import
        - writer: persists the accepted text (file write, HTTP upload, ...)
        - validator: StoryValidator (built from catalog + dialect when omitted)
        - verifier: RuntimeVerifier (from settings when omitted)
    """

    def __init__(
        self,
        catalog: CatalogLike,
        dialect: Union[Dialect, str] = Dialect.REACT,
        *,
        writer: Optional[Writer] = None,
        validator: Optional[StoryValidator] = None,
        verifier: Optional[RuntimeVerifier] = None,
        callbacks: list = None,
        import_path: Optional[str] = None,
        story_prefix: Optional[str] = None,
        strict_import_paths: bool = False,
    ) -> None:
        self.dialect = Dialect(dialect)
        self.validator = validator or StoryValidator(
            catalog, self.dialect,
            import_path=import_path,
            story_prefix=story_prefix,
            strict_import_paths=strict_import_paths,
        )
        self.verifier = verifier or RuntimeVerifier.from_settings()
        self.writer = writer
        self.callbacks = callbacks or []

    @classmethod
    async def from_config(
        cls,
        config: ProjectConfig,
        *,
        introspection_timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> "StoryPipeline":
        """Discover the catalog described by ``config`` and build a pipeline around it."""
        timeout = settings.introspection_timeout_seconds if introspection_timeout is None else introspection_timeout
        catalog = await ComponentCatalog.from_config(config, introspection_timeout=timeout)
        dialect = kwargs.pop("dialect", None) or config.dialect
        kwargs.setdefault("import_path", config.import_path or None)
        kwargs.setdefault("story_prefix", settings.story_prefix)
        kwargs.setdefault("strict_import_paths", settings.strict_import_paths)
        oracle = NameOracle(catalog, primary_import_path=kwargs["import_path"], deprecated=config.deprecated)
        pipeline = cls(oracle, dialect, **kwargs)
        await pipeline._fire("on_catalog_built", list(catalog.records))
        return pipeline

    async def process(self, response: str, title: Optional[str] = None) -> PipelineResult:
        artifact = extract_artifact(response, self.dialect)
        if artifact is None:
            logger.info("No code block found in response (%d chars)", len(response or ""))
            return PipelineResult(stage=PipelineStage.EXTRACTION, feedback=NO_CODE_FEEDBACK)

        outcome = self.validator.validate(artifact)
        for name in outcome.applied_repairs:
            await self._fire("on_repair_applied", name)
        await self._fire("on_validation_complete", outcome, self.dialect)
        final_text = outcome.repaired_artifact or artifact

        if not outcome.is_valid:
            return PipelineResult(
                stage=PipelineStage.VALIDATION,
                artifact=final_text,
                validation=outcome,
                feedback=format_validation_feedback(outcome),
            )

        written_to = None
        if self.writer is not None:
            try:
                written = self.writer(final_text)
                if asyncio.iscoroutine(written):
                    written = await written
                written_to = str(written) if written is not None else None
            except Exception as e:
                logger.warning("Story writer failed: %s", e)
                await self._fire("on_error", e, {"stage": PipelineStage.WRITE.value, "title": title or ""})
                return PipelineResult(
                    stage=PipelineStage.WRITE, artifact=final_text, validation=outcome, error=str(e),
                )

        runtime = await self.verifier.verify_artifact(final_text, fallback_title=title or "Untitled")
        await self._fire("on_runtime_check", runtime, title or "")
        if not runtime.passed:
            return PipelineResult(
                stage=PipelineStage.RUNTIME,
                artifact=final_text,
                validation=outcome,
                runtime=runtime,
                written_to=written_to,
                feedback=format_runtime_feedback(runtime),
            )

        return PipelineResult(
            stage=PipelineStage.COMPLETE,
            accepted=True,
            artifact=final_text,
            validation=outcome,
            runtime=runtime,
            written_to=written_to,
        )

    async def _fire(self, hook: str, *args: Any) -> None:
        """Invoke ``hook`` on every registered callback; a failing callback never stops the run."""
        for cb in self.callbacks:
            method = getattr(cb, hook, None)
            if method is None:
                continue
            try:
                await method(*args)
            except Exception as cb_exc:
                logger.warning(f"[Pipeline] Callback error on '{hook}': {cb_exc}")
