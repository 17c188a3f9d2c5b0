"""
Centralized exception hierarchy for GraalKit.

Every failure a pipeline run can hit maps to one of these types, so callers
can tell the failing concern apart without parsing messages. None of them is
retried anywhere in GraalKit.
"""

from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class GraalKitError(Exception):
    """Base exception for all GraalKit errors."""

    pass


# ============================================================================
# Platform Exceptions
# ============================================================================


class UnsupportedPlatformError(GraalKitError):
    """Raised when the host OS or CPU architecture has no GraalVM distribution."""

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        super().__init__(f"No GraalVM support for {kind}: {value}")


# ============================================================================
# Cache Exceptions
# ============================================================================


class CacheError(GraalKitError):
    """Base exception for cache-related errors."""

    pass


class CacheDirectoryUnavailableError(CacheError):
    """Raised when a cache directory cannot be created and does not exist."""

    def __init__(self, path, reason: str = ""):
        self.path = path
        msg = (
            "Unable to make cache directory, and the cache directory "
            f"does not already exist: {path}"
        )
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class CacheLockTimeoutError(CacheError):
    """Raised when a cache entry lock cannot be acquired within timeout."""

    pass


# ============================================================================
# Stage Exceptions
# ============================================================================


class TransferError(GraalKitError):
    """Raised when downloading an archive fails."""

    pass


class ExtractionError(GraalKitError):
    """Raised when unpacking an archive fails."""

    pass


class InsecureArchiveError(ExtractionError):
    """Archive member would be written outside the destination."""

    pass


class UnsupportedArchiveEntryError(ExtractionError):
    """Archive contains a member type that is never extracted (devices, FIFOs)."""

    pass


class CompilerError(GraalKitError):
    """Base exception for native-image compiler errors."""

    pass


class CompilerNotFoundError(CompilerError):
    """Raised when the compiler executable is missing from the toolkit."""

    pass


class CompilerInvocationError(CompilerError):
    """Raised when the compiler process exits with a non-zero status."""

    def __init__(self, returncode: int, command: list, output_tail: Optional[list] = None):
        self.returncode = returncode
        self.command = command
        self.output_tail = output_tail or []
        msg = f"native-image exited with code {returncode}"
        if self.output_tail:
            msg += "\n" + "\n".join(self.output_tail)
        super().__init__(msg)


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigError(GraalKitError):
    """Configuration parsing or validation error."""

    pass


# ============================================================================
# Pipeline Exceptions
# ============================================================================


class PipelineError(GraalKitError):
    """Raised when a pipeline is wired incorrectly."""

    pass


class StageFailedError(PipelineError):
    """Raised when a stage's action fails; wraps the original error."""

    def __init__(self, stage: str, cause: BaseException):
        self.stage = stage
        self.cause = cause
        super().__init__(f"Stage '{stage}' failed: {cause}")
