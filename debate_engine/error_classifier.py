"""Classification of per-turn generation failures."""

from enum import Enum
import logging
import re

from models.providers.exceptions import (
    ProviderOverloadedError,
    ProviderRateLimitError,
    ProviderVerificationError,
)

from .exceptions import StreamingNotSupportedError
from .types import DebateErrorType

logger = logging.getLogger(__name__)


class StreamFailureKind(Enum):
    """How the orchestrator should react to a failed streaming turn."""

    VERIFICATION_REQUIRED = "verification_required"  # suppress streaming, fall back
    OVERLOADED = "overloaded"  # fall back this turn only
    UNSUPPORTED = "unsupported"  # fall back this turn only
    OTHER = "other"  # no fallback

    @property
    def allows_fallback(self) -> bool:
        return self is not StreamFailureKind.OTHER


VERIFICATION_PATTERN = re.compile(
    r"organization.{0,40}verif|must be verified|verification required|verify your organization",
    re.IGNORECASE,
)
OVERLOAD_PATTERN = re.compile(
    r"overloaded|rate.?limit|too many requests|\b429\b|\b529\b|\b503\b|capacity",
    re.IGNORECASE,
)
RATE_LIMIT_PATTERN = re.compile(r"\b429\b|rate.?limit|too many requests", re.IGNORECASE)


def classify_stream_error(error: BaseException) -> StreamFailureKind:
    """Structured provider errors win; message text is the fallback signal."""
    if isinstance(error, ProviderVerificationError):
        return StreamFailureKind.VERIFICATION_REQUIRED
    if isinstance(error, (ProviderOverloadedError, ProviderRateLimitError)):
        return StreamFailureKind.OVERLOADED
    if isinstance(error, (StreamingNotSupportedError, NotImplementedError)):
        return StreamFailureKind.UNSUPPORTED

    text = str(error)
    if VERIFICATION_PATTERN.search(text):
        return StreamFailureKind.VERIFICATION_REQUIRED
    if OVERLOAD_PATTERN.search(text):
        return StreamFailureKind.OVERLOADED
    return StreamFailureKind.OTHER


def classify_turn_error(error: BaseException) -> DebateErrorType:
    if isinstance(error, ProviderRateLimitError):
        return "rate_limit"
    if RATE_LIMIT_PATTERN.search(str(error)):
        return "rate_limit"
    return "ai_error"
