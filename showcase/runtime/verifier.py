"""Runtime verification against the live preview server.

After a story file is written the verifier walks a bounded state machine:

    AWAIT_PROPAGATION → INDEX_POLL (≤ retry_attempts) → FRAME_CHECK
                                   ↘ NOT_FOUND           ↘ VERIFIED | RENDER_FAILED

Verification that is switched off, or that has no server URL to talk to,
finishes as SKIPPED and counts as a pass. Timeouts and connection failures are
classified into the result; they never propagate.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

import httpx

from showcase.config import ShowcaseSettings, settings
from showcase.exceptions import RuntimeVerificationError
from showcase.runtime.identifiers import apply_prefix, extract_title, title_to_identifier
from showcase.runtime.signatures import classify_frame
from showcase.types import RuntimeCheckResult, RuntimeErrorKind, VerificationState

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_URL = "http://localhost:6006"

SleepFn = Callable[[float], Awaitable[None]]


class VerifierState(str, Enum):
    AWAIT_PROPAGATION = "await_propagation"
    INDEX_POLL = "index_poll"
    FRAME_CHECK = "frame_check"
    VERIFIED = "verified"
    NOT_FOUND = "not_found"
    RENDER_FAILED = "render_failed"
    SKIPPED = "skipped"


def resolve_preview_url(cfg: ShowcaseSettings = settings) -> Optional[str]:
    """preview_url > proxy port > preview_port > default. Blank or "none" means no server."""
    if cfg.preview_url is not None:
        url = cfg.preview_url.strip()
        if not url or url.lower() == "none":
            return None
        return url.rstrip("/")
    if cfg.proxy_enabled:
        return f"http://localhost:{cfg.proxy_port}"
    if cfg.preview_port:
        return f"http://localhost:{cfg.preview_port}"
    return DEFAULT_PREVIEW_URL


def is_enabled(cfg: ShowcaseSettings = settings) -> bool:
    if cfg.runtime_validation is False:
        return False
    if cfg.proxy_enabled:
        return True
    return cfg.runtime_validation is True


def _story_ids(index: dict) -> list[str]:
    entries = index.get("entries") or index.get("stories") or {}
    if isinstance(entries, dict):
        return list(entries)
    return [e["id"] for e in entries if isinstance(e, dict) and "id" in e]


class RuntimeVerifier:
    """Checks that a written story shows up in the preview index and renders cleanly."""

    def __init__(
        self,
        base_url: Optional[str] = DEFAULT_PREVIEW_URL,
        *,
        enabled: bool = True,
        propagation_delay: float = 3.0,
        request_timeout: float = 5.0,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        backoff_factor: float = 1.0,
        story_prefix: str = "Generated/",
        client: Optional[httpx.AsyncClient] = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if retry_attempts < 1:
            raise RuntimeVerificationError(f"retry_attempts must be >= 1, got {retry_attempts}")
        if request_timeout <= 0:
            raise RuntimeVerificationError(f"request_timeout must be > 0, got {request_timeout}")
        if propagation_delay < 0 or retry_delay < 0 or backoff_factor < 1.0:
            raise RuntimeVerificationError(
                "delays must be non-negative and backoff_factor >= 1.0",
                details={"propagation_delay": propagation_delay, "retry_delay": retry_delay,
                         "backoff_factor": backoff_factor},
            )
        self.base_url = base_url.rstrip("/") if base_url else None
        self.enabled = enabled
        self.propagation_delay = propagation_delay
        self.request_timeout = request_timeout
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self.backoff_factor = backoff_factor
        self.story_prefix = story_prefix
        self._client = client
        self._sleep = sleep

    @classmethod
    def from_settings(cls, cfg: ShowcaseSettings = settings, **overrides) -> "RuntimeVerifier":
        kwargs = dict(
            base_url=resolve_preview_url(cfg),
            enabled=is_enabled(cfg),
            propagation_delay=cfg.propagation_delay_seconds,
            request_timeout=cfg.request_timeout_seconds,
            retry_attempts=cfg.retry_attempts,
            retry_delay=cfg.retry_delay_seconds,
            backoff_factor=cfg.retry_backoff,
            story_prefix=cfg.story_prefix,
        )
        kwargs.update(overrides)
        return cls(**kwargs)

    def delay_for(self, attempt: int) -> float:
        """Wait after failed index poll number ``attempt`` (1-based)."""
        return self.retry_delay * self.backoff_factor ** (attempt - 1)

    # ── Public API ─────────────────────────────────────────────────────────

    async def verify(self, artifact_title: str, expected_id_prefix: Optional[str] = None) -> RuntimeCheckResult:
        if not self.enabled:
            logger.debug("Runtime verification disabled, skipping")
            return RuntimeCheckResult(state=VerificationState.SKIPPED, story_found=True,
                                      details="Runtime verification disabled")
        if not self.base_url:
            logger.warning("No preview server URL configured; skipping runtime verification")
            return RuntimeCheckResult(state=VerificationState.SKIPPED, story_found=True,
                                      details="Preview server URL not configured")

        prefix = self.story_prefix if expected_id_prefix is None else expected_id_prefix
        prefix_id = title_to_identifier(apply_prefix(artifact_title, prefix))
        logger.info("Runtime verification: looking for '%s--*' at %s", prefix_id, self.base_url)

        if self._client is not None:
            return await self._run(self._client, prefix_id)
        async with httpx.AsyncClient(timeout=self.request_timeout) as client:
            return await self._run(client, prefix_id)

    async def verify_artifact(self, artifact_text: str, fallback_title: str) -> RuntimeCheckResult:
        """Verify using the title written in the artifact, else ``fallback_title`` plus the prefix."""
        title = extract_title(artifact_text)
        if title:
            return await self.verify(title, expected_id_prefix="")
        return await self.verify(fallback_title)

    # ── State machine ──────────────────────────────────────────────────────

    async def _run(self, client: httpx.AsyncClient, prefix_id: str) -> RuntimeCheckResult:
        state = VerifierState.AWAIT_PROPAGATION
        attempt = 0
        story_id: Optional[str] = None
        poll_failures: list[Optional[RuntimeErrorKind]] = []
        last_error: Optional[str] = None
        result: Optional[RuntimeCheckResult] = None

        while result is None:
            if state == VerifierState.AWAIT_PROPAGATION:
                await self._sleep(self.propagation_delay)
                state = VerifierState.INDEX_POLL

            elif state == VerifierState.INDEX_POLL:
                attempt += 1
                story_id, last_error, kind = await self._poll_index(client, prefix_id)
                if story_id:
                    logger.debug("Found story %s on attempt %d", story_id, attempt)
                    state = VerifierState.FRAME_CHECK
                    continue
                poll_failures.append(kind)
                if attempt >= self.retry_attempts:
                    result = self._not_found(prefix_id, poll_failures, last_error)
                else:
                    logger.debug("Story not in index (attempt %d/%d)", attempt, self.retry_attempts)
                    await self._sleep(self.delay_for(attempt))

            elif state == VerifierState.FRAME_CHECK:
                result = await self._check_frame(client, story_id)

        return result

    async def _poll_index(
        self, client: httpx.AsyncClient, prefix_id: str,
    ) -> tuple[Optional[str], Optional[str], Optional[RuntimeErrorKind]]:
        """(matching story id, error text, transport failure kind) for one index fetch."""
        try:
            response = await client.get(f"{self.base_url}/index.json", timeout=self.request_timeout)
        except httpx.TimeoutException as e:
            return None, f"Index request timed out after {self.request_timeout}s: {e}", RuntimeErrorKind.TIMEOUT
        except httpx.TransportError as e:
            return None, f"Could not reach preview server: {e}", RuntimeErrorKind.CONNECTION_ERROR

        if response.status_code != 200:
            return None, f"Index returned {response.status_code}", None
        try:
            index = response.json()
        except ValueError:
            return None, "Index is not valid JSON", None
        if not isinstance(index, dict):
            return None, "Index has an unexpected shape", None

        for story_id in _story_ids(index):
            if story_id.startswith(prefix_id + "--") and not story_id.endswith("--docs"):
                return story_id, None, None
        return None, None, None

    def _not_found(
        self, prefix_id: str, failures: list[Optional[RuntimeErrorKind]], last_error: Optional[str],
    ) -> RuntimeCheckResult:
        kind = RuntimeErrorKind.NOT_FOUND
        if failures and all(f == RuntimeErrorKind.TIMEOUT for f in failures):
            kind = RuntimeErrorKind.TIMEOUT
        elif failures and all(f is not None for f in failures):
            kind = RuntimeErrorKind.CONNECTION_ERROR
        logger.warning(
            "Stories with prefix '%s' not found in preview index after %d attempt(s)",
            prefix_id, self.retry_attempts,
        )
        return RuntimeCheckResult(
            state=VerificationState.NOT_FOUND,
            story_found=False,
            error_kind=kind,
            render_error=last_error or "Story not found in preview index; the file may not have been picked up",
            details=f"Story ID prefix: {prefix_id}",
        )

    async def _check_frame(self, client: httpx.AsyncClient, story_id: str) -> RuntimeCheckResult:
        url = f"{self.base_url}/iframe.html?id={story_id}&viewMode=story"
        details = f"Story ID: {story_id}, URL: {url}"

        def failed(kind: RuntimeErrorKind, error: str) -> RuntimeCheckResult:
            logger.warning("Runtime error in story %s: %s", story_id, error)
            return RuntimeCheckResult(
                state=VerificationState.RENDER_FAILED, story_found=True, story_id=story_id,
                render_error=error, error_kind=kind, details=details,
            )

        try:
            response = await client.get(url, timeout=self.request_timeout)
        except httpx.TimeoutException:
            return failed(RuntimeErrorKind.TIMEOUT, f"Story frame timed out after {self.request_timeout}s")
        except httpx.TransportError as e:
            return failed(RuntimeErrorKind.CONNECTION_ERROR, f"Could not load story frame: {e}")

        if response.status_code != 200:
            return failed(RuntimeErrorKind.RENDER_ERROR, f"Story frame returned {response.status_code}")

        problem = classify_frame(response.text)
        if problem:
            return failed(problem.kind, problem.detail)

        logger.info("Runtime verification passed for story %s", story_id)
        return RuntimeCheckResult(state=VerificationState.VERIFIED, story_found=True, story_id=story_id)
