"""Typed exception hierarchy.

Expected defects in generated artifacts are never raised; they are returned as
ValidationDiagnostic / RuntimeCheckResult data. These exceptions cover
configuration mistakes and internal faults only.
"""


class ShowcaseError(Exception):
    """Base exception for all showcase errors."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.details = details or {}


class ConfigError(ShowcaseError):
    """Project configuration is missing or invalid."""
    def __init__(self, message: str, path: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.path = path


class CatalogSourceError(ShowcaseError):
    """A single discovery source could not be read. The builder skips it."""
    def __init__(self, message: str, source: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.source = source


class IntrospectionError(CatalogSourceError):
    """Live package introspection failed (node missing, load error, timeout)."""
    def __init__(self, message: str, package: str = "", **kwargs):
        super().__init__(message, source=package, **kwargs)
        self.package = package


class ArtifactParseError(ShowcaseError):
    """Internal parser fault. Converted to a diagnostic at the validator boundary."""
    def __init__(self, message: str, line: int = 0, **kwargs):
        super().__init__(message, **kwargs)
        self.line = line


class RuntimeVerificationError(ShowcaseError):
    """Runtime verifier was configured with impossible parameters."""
    pass
