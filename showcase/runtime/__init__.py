"""Runtime verification of written stories against the live preview server."""

from showcase.runtime.identifiers import apply_prefix, extract_title, title_to_identifier
from showcase.runtime.signatures import ERROR_SIGNATURES, classify_frame
from showcase.runtime.verifier import (
    RuntimeVerifier,
    VerifierState,
    is_enabled,
    resolve_preview_url,
)

__all__ = [
    "ERROR_SIGNATURES",
    "RuntimeVerifier",
    "VerifierState",
    "apply_prefix",
    "classify_frame",
    "extract_title",
    "is_enabled",
    "resolve_preview_url",
    "title_to_identifier",
]
