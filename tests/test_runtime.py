"""Runtime verifier: preview index polling, frame checks, error classification."""

import httpx
import pytest

from showcase.config import ShowcaseSettings
from showcase.exceptions import RuntimeVerificationError
from showcase.runtime import RuntimeVerifier
from showcase.runtime.identifiers import apply_prefix, extract_title, title_to_identifier
from showcase.runtime.signatures import classify_frame
from showcase.runtime.verifier import DEFAULT_PREVIEW_URL, is_enabled, resolve_preview_url
from showcase.types import RuntimeErrorKind, VerificationState

STORY_ID = "generated-product-card--default"


def _index(*ids):
    return {"v": 5, "entries": {i: {"id": i, "type": "story"} for i in ids}}


def _settings(**kwargs):
    return ShowcaseSettings(_env_file=None, **kwargs)


# ─────────────────────────────────────────────────────────────────────────────
# Skipping
# ─────────────────────────────────────────────────────────────────────────────

class TestSkipped:

    @pytest.mark.asyncio
    async def test_disabled(self):
        result = await RuntimeVerifier(enabled=False).verify("Product Card")
        assert result.state == VerificationState.SKIPPED
        assert result.passed
        assert result.details == "Runtime verification disabled"

    @pytest.mark.asyncio
    async def test_no_preview_url(self):
        result = await RuntimeVerifier(None).verify("Product Card")
        assert result.state == VerificationState.SKIPPED
        assert result.details == "Preview server URL not configured"

    @pytest.mark.asyncio
    async def test_skipped_makes_no_requests(self, preview_server):
        verifier, served = preview_server([_index(STORY_ID)], enabled=False)
        await verifier.verify("Product Card")
        assert served == {"index": 0, "frame": 0}


# ─────────────────────────────────────────────────────────────────────────────
# Index polling
# ─────────────────────────────────────────────────────────────────────────────

class TestIndexPolling:

    @pytest.mark.asyncio
    async def test_found_on_first_poll(self, preview_server, fake_sleep):
        verifier, served = preview_server([_index(STORY_ID)], sleep=fake_sleep)
        result = await verifier.verify("Product Card")
        assert result.state == VerificationState.VERIFIED
        assert result.story_found
        assert result.story_id == STORY_ID
        assert fake_sleep.calls == [3.0]
        assert served == {"index": 1, "frame": 1}

    @pytest.mark.asyncio
    async def test_found_after_backoff(self, preview_server, fake_sleep):
        verifier, served = preview_server(
            [_index(), _index(), _index(STORY_ID)], sleep=fake_sleep, backoff_factor=2.0,
        )
        result = await verifier.verify("Product Card")
        assert result.state == VerificationState.VERIFIED
        assert fake_sleep.calls == [3.0, 1.0, 2.0]
        assert served["index"] == 3

    @pytest.mark.asyncio
    async def test_never_found(self, preview_server, fake_sleep):
        verifier, served = preview_server([_index("generated-other--default")], sleep=fake_sleep)
        result = await verifier.verify("Product Card")
        assert result.state == VerificationState.NOT_FOUND
        assert not result.passed
        assert result.error_kind == RuntimeErrorKind.NOT_FOUND
        assert "not found in preview index" in result.render_error
        assert result.details == "Story ID prefix: generated-product-card"
        assert served == {"index": 3, "frame": 0}
        # no wait after the final attempt
        assert fake_sleep.calls == [3.0, 1.0, 1.0]

    @pytest.mark.asyncio
    async def test_docs_entries_ignored(self, preview_server):
        verifier, _ = preview_server([_index("generated-product-card--docs")])
        result = await verifier.verify("Product Card")
        assert result.state == VerificationState.NOT_FOUND

    @pytest.mark.asyncio
    async def test_prefix_must_end_at_separator(self, preview_server):
        verifier, _ = preview_server([_index("generated-product-cards--default")])
        result = await verifier.verify("Product Card")
        assert result.state == VerificationState.NOT_FOUND

    @pytest.mark.asyncio
    async def test_list_shaped_index(self, preview_server):
        verifier, _ = preview_server([{"stories": [{"id": STORY_ID}, {"title": "no id"}]}])
        result = await verifier.verify("Product Card")
        assert result.story_id == STORY_ID

    @pytest.mark.asyncio
    async def test_title_already_prefixed(self, preview_server):
        verifier, _ = preview_server([_index(STORY_ID)])
        result = await verifier.verify("Generated/Product Card")
        assert result.state == VerificationState.VERIFIED

    @pytest.mark.asyncio
    async def test_connection_errors(self, preview_server):
        verifier, served = preview_server([httpx.ConnectError("refused")])
        result = await verifier.verify("Product Card")
        assert result.state == VerificationState.NOT_FOUND
        assert result.error_kind == RuntimeErrorKind.CONNECTION_ERROR
        assert result.render_error == "Could not reach preview server: refused"
        assert served["index"] == 3

    @pytest.mark.asyncio
    async def test_timeouts(self, preview_server):
        verifier, _ = preview_server([httpx.ReadTimeout("slow")])
        result = await verifier.verify("Product Card")
        assert result.error_kind == RuntimeErrorKind.TIMEOUT
        assert result.render_error.startswith("Index request timed out after 5.0s")

    @pytest.mark.asyncio
    async def test_mixed_failures_are_not_found(self, preview_server):
        verifier, _ = preview_server([httpx.ReadTimeout("slow"), _index()])
        result = await verifier.verify("Product Card")
        assert result.error_kind == RuntimeErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_recovers_after_transport_failure(self, preview_server):
        verifier, _ = preview_server([httpx.ConnectError("refused"), _index(STORY_ID)])
        result = await verifier.verify("Product Card")
        assert result.state == VerificationState.VERIFIED


# ─────────────────────────────────────────────────────────────────────────────
# Frame check
# ─────────────────────────────────────────────────────────────────────────────

class TestFrameCheck:

    @pytest.mark.asyncio
    async def test_module_error(self, preview_server):
        frame = "<html><body><pre>Module not found: Can't resolve './Missing'</pre></body></html>"
        verifier, _ = preview_server([_index(STORY_ID)], frame=frame)
        result = await verifier.verify("Product Card")
        assert result.state == VerificationState.RENDER_FAILED
        assert result.story_found
        assert result.error_kind == RuntimeErrorKind.MODULE_ERROR
        assert result.render_error == "Module not found: Can't resolve './Missing'"
        assert STORY_ID in result.details

    @pytest.mark.asyncio
    async def test_non_200_frame(self, preview_server):
        verifier, _ = preview_server([_index(STORY_ID)], frame=httpx.Response(500))
        result = await verifier.verify("Product Card")
        assert result.state == VerificationState.RENDER_FAILED
        assert result.error_kind == RuntimeErrorKind.RENDER_ERROR
        assert result.render_error == "Story frame returned 500"

    @pytest.mark.asyncio
    async def test_error_boundary(self, preview_server):
        frame = '<div class="sb-show-errordisplay"><h1 id="error-message">Boom happened</h1></div>'
        verifier, _ = preview_server([_index(STORY_ID)], frame=frame)
        result = await verifier.verify("Product Card")
        assert result.error_kind == RuntimeErrorKind.RENDER_ERROR
        assert result.render_error == "Boom happened"

    @pytest.mark.asyncio
    async def test_frame_connection_error(self, preview_server):
        verifier, _ = preview_server([_index(STORY_ID)], frame=httpx.ConnectError("down"))
        result = await verifier.verify("Product Card")
        assert result.state == VerificationState.RENDER_FAILED
        assert result.error_kind == RuntimeErrorKind.CONNECTION_ERROR

    @pytest.mark.asyncio
    async def test_frame_timeout(self, preview_server):
        verifier, _ = preview_server([_index(STORY_ID)], frame=httpx.ReadTimeout("slow"))
        result = await verifier.verify("Product Card")
        assert result.error_kind == RuntimeErrorKind.TIMEOUT


class TestVerifyArtifact:

    @pytest.mark.asyncio
    async def test_uses_written_title_verbatim(self, preview_server):
        verifier, _ = preview_server([_index("custom-widget--primary")])
        result = await verifier.verify_artifact(
            "export default { title: 'Custom/Widget' };\n", fallback_title="Ignored",
        )
        assert result.story_id == "custom-widget--primary"

    @pytest.mark.asyncio
    async def test_falls_back_to_prefixed_title(self, preview_server):
        verifier, _ = preview_server([_index("generated-widget--primary")])
        result = await verifier.verify_artifact("export default {};\n", fallback_title="Widget")
        assert result.state == VerificationState.VERIFIED


# ─────────────────────────────────────────────────────────────────────────────
# Construction and settings
# ─────────────────────────────────────────────────────────────────────────────

class TestConstruction:

    @pytest.mark.parametrize("kwargs", [
        {"retry_attempts": 0},
        {"request_timeout": 0},
        {"retry_delay": -1.0},
        {"propagation_delay": -0.5},
        {"backoff_factor": 0.5},
    ])
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(RuntimeVerificationError):
            RuntimeVerifier(**kwargs)

    def test_delay_for(self):
        verifier = RuntimeVerifier(retry_delay=0.5, backoff_factor=2.0)
        assert [verifier.delay_for(n) for n in (1, 2, 3)] == [0.5, 1.0, 2.0]

    def test_trailing_slash_stripped(self):
        assert RuntimeVerifier("http://localhost:6006/").base_url == "http://localhost:6006"

    def test_from_settings(self):
        cfg = _settings(preview_url="http://preview.test:9009/", runtime_validation=True, retry_attempts=5)
        verifier = RuntimeVerifier.from_settings(cfg)
        assert verifier.base_url == "http://preview.test:9009"
        assert verifier.enabled
        assert verifier.retry_attempts == 5

    def test_from_settings_overrides(self):
        verifier = RuntimeVerifier.from_settings(_settings(runtime_validation=True), enabled=False)
        assert not verifier.enabled


class TestPreviewUrl:

    def test_default(self):
        assert resolve_preview_url(_settings()) == DEFAULT_PREVIEW_URL

    @pytest.mark.parametrize("value", ["", "  ", "none", "None"])
    def test_blank_or_none_means_no_server(self, value):
        assert resolve_preview_url(_settings(preview_url=value)) is None

    def test_explicit_url_wins(self):
        cfg = _settings(preview_url="http://a.test/", proxy_enabled=True, preview_port=7000)
        assert resolve_preview_url(cfg) == "http://a.test"

    def test_proxy_port(self):
        assert resolve_preview_url(_settings(proxy_enabled=True, proxy_port=8080)) == "http://localhost:8080"

    def test_preview_port(self):
        assert resolve_preview_url(_settings(preview_port=7000)) == "http://localhost:7000"


class TestIsEnabled:

    def test_off_by_default(self):
        assert not is_enabled(_settings())

    def test_explicit_on(self):
        assert is_enabled(_settings(runtime_validation=True))

    def test_proxy_mode_turns_it_on(self):
        assert is_enabled(_settings(proxy_enabled=True))

    def test_explicit_off_beats_proxy(self):
        assert not is_enabled(_settings(proxy_enabled=True, runtime_validation=False))


# ─────────────────────────────────────────────────────────────────────────────
# Identifiers and signatures
# ─────────────────────────────────────────────────────────────────────────────

class TestIdentifiers:

    @pytest.mark.parametrize("title,expected", [
        ("Generated/My Card!", "generated-my-card"),
        ("Generated/Product Card", "generated-product-card"),
        ("  A//B  ", "a-b"),
        ("Ünïcode Card", "n-code-card"),
    ])
    def test_title_to_identifier(self, title, expected):
        assert title_to_identifier(title) == expected

    def test_apply_prefix(self):
        assert apply_prefix("Card", "Generated/") == "Generated/Card"
        assert apply_prefix("Generated/Card", "Generated/") == "Generated/Card"
        assert apply_prefix("Card", "") == "Card"
        assert apply_prefix("Card", None) == "Card"

    def test_extract_title(self):
        assert extract_title("const meta = {\n  title: \"Custom/Widget\",\n};") == "Custom/Widget"
        assert extract_title("export default {};") is None


class TestClassifyFrame:

    def test_clean_frame(self):
        assert classify_frame("<html><body><div id='root'>ok</div></body></html>") is None

    def test_css_selector_is_not_an_error(self):
        assert classify_frame("<style>.sb-show-errordisplay { display: none }</style>") is None

    def test_first_signature_wins(self):
        problem = classify_frame("<pre>SyntaxError: x is not defined</pre>")
        assert problem.kind == RuntimeErrorKind.RENDER_ERROR
        assert problem.detail == "SyntaxError: x is not defined"

    def test_undefined_variable_checked_before_module_resolution(self):
        problem = classify_frame("<pre>Module not found because Chart is not defined</pre>")
        assert problem.kind == RuntimeErrorKind.RENDER_ERROR

    def test_loader_error_checked_first(self):
        problem = classify_frame("<pre>importers[path] is not a function; Foo is not defined</pre>")
        assert problem.kind == RuntimeErrorKind.MODULE_ERROR

    def test_render_error_from_error_line(self):
        problem = classify_frame("<div>TypeError: Cannot read properties of undefined (reading 'map')</div>")
        assert problem.kind == RuntimeErrorKind.RENDER_ERROR
        assert problem.detail.startswith("Cannot read properties of undefined")

    def test_detail_capped(self):
        problem = classify_frame("<pre>ReferenceError " + "x" * 500 + "</pre>")
        assert len(problem.detail) == 200

    def test_boundary_without_message(self):
        problem = classify_frame('<div class="story-error">oops</div>')
        assert problem == (RuntimeErrorKind.RENDER_ERROR, "Preview error boundary triggered")
