"""Structured JSON logging callback for pipeline lifecycle events."""

import json
import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any

from showcase.callbacks.base import BaseCallback
from showcase.types import ComponentRecord, Dialect, RuntimeCheckResult, ValidationOutcome

logger = logging.getLogger("showcase.audit")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class LoggingCallback(BaseCallback):
    """Emits structured JSON log lines for every lifecycle event.

    Each log line is a self-contained JSON object with:
      - event: event type name
      - ts: ISO-8601 UTC timestamp
      - relevant fields depending on event

    Log level: INFO for normal events, WARNING for failed checks, ERROR for errors.
    Logger name: showcase.audit (configure in your logging setup)
    """

    async def on_catalog_built(self, records: list[ComponentRecord], **kwargs: Any) -> None:
        origins = Counter(r.origin.value for r in records)
        logger.info(json.dumps({
            "event": "catalog_built",
            "ts": _now(),
            "component_count": len(records),
            "origins": dict(origins),
        }))

    async def on_validation_complete(
        self, outcome: ValidationOutcome, dialect: Dialect, **kwargs: Any
    ) -> None:
        level = logging.INFO if outcome.is_valid else logging.WARNING
        logger.log(level, json.dumps({
            "event": "validation_complete",
            "ts": _now(),
            "dialect": dialect.value,
            "is_valid": outcome.is_valid,
            "error_codes": [d.code for d in outcome.errors],
            "warning_count": len(outcome.warnings),
            "repairs": outcome.applied_repairs,
        }))

    async def on_repair_applied(self, repair_name: str, **kwargs: Any) -> None:
        logger.info(json.dumps({
            "event": "repair_applied",
            "ts": _now(),
            "repair": repair_name,
        }))

    async def on_runtime_check(
        self, result: RuntimeCheckResult, title: str, **kwargs: Any
    ) -> None:
        level = logging.INFO if result.passed else logging.WARNING
        logger.log(level, json.dumps({
            "event": "runtime_check",
            "ts": _now(),
            "title": title[:200],
            "state": result.state.value,
            "story_id": result.story_id,
            "error_kind": result.error_kind.value if result.error_kind else None,
            "render_error": (result.render_error or "")[:200],
        }))

    async def on_error(
        self, error: Exception, context: dict[str, Any], **kwargs: Any
    ) -> None:
        logger.error(json.dumps({
            "event": "pipeline_error",
            "ts": _now(),
            "error_type": type(error).__name__,
            "error": str(error),
            "context": {k: str(v)[:200] for k, v in context.items()},
        }))
