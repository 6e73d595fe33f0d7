"""
Security utilities for auto-mr.
"""
import re
from typing import List, Optional

# Platform tokens
_GITLAB_TOKEN = re.compile(r"glpat-[A-Za-z0-9_-]{6,}")
_GITHUB_TOKEN = re.compile(r"gh[pousr]_[A-Za-z0-9]{20,}")
_GITHUB_FINE_GRAINED = re.compile(r"github_pat_[A-Za-z0-9_]{20,}")

# Request headers
_AUTH_HEADER = re.compile(
    r"(authorization['\"]?\s*[:=]\s*['\"]?)(?:bearer|basic|token)\s+[A-Za-z0-9+/=_.-]{6,}",
    re.IGNORECASE,
)
_PRIVATE_TOKEN_HEADER = re.compile(
    r"(private-token['\"]?\s*[:=]\s*['\"]?)[A-Za-z0-9_-]{6,}",
    re.IGNORECASE,
)

# key=value pairs
_SECRET_NAMES = ["password", "passwd", "secret", "token", "api_key", "apikey", "access_token"]


def redact_sensitive_info(text: str, extra_secrets: Optional[List[str]] = None) -> Optional[str]:
    """
    Redact tokens and credentials from text for logging.

    Patterns redacted:
    - GitLab personal access tokens (glpat-...)
    - GitHub tokens (ghp_, gho_, ghu_, ghs_, ghr_, github_pat_)
    - Authorization / PRIVATE-TOKEN header values
    - key=value pairs whose key names a secret (token=..., password=...)
    - Known secrets provided in extra_secrets

    Commit SHAs and other long hex strings are left intact.

    Args:
        text: Original text with potential sensitive data
        extra_secrets: Optional list of specific secret values to redact

    Returns:
        Text with sensitive values replaced by [REDACTED]
    """
    if not text:
        return text

    redacted = text

    if extra_secrets:
        # Longest first so overlapping secrets are fully covered
        for secret in sorted((s for s in extra_secrets if s), key=len, reverse=True):
            if len(secret) < 3:
                continue
            redacted = redacted.replace(secret, "[REDACTED]")

    redacted = _GITLAB_TOKEN.sub("[REDACTED]", redacted)
    redacted = _GITHUB_FINE_GRAINED.sub("[REDACTED]", redacted)
    redacted = _GITHUB_TOKEN.sub("[REDACTED]", redacted)
    redacted = _AUTH_HEADER.sub(r"\1[REDACTED]", redacted)
    redacted = _PRIVATE_TOKEN_HEADER.sub(r"\1[REDACTED]", redacted)

    for name in _SECRET_NAMES:
        # Quoted values, then bare values
        redacted = re.sub(
            rf"(\b{name}\s*[=:]\s*)(['\"])(.*?)(\2)",
            r"\1\2[REDACTED]\4",
            redacted,
            flags=re.IGNORECASE,
        )
        redacted = re.sub(
            rf"(\b{name}\s*=\s*)(?!['\"]|\[REDACTED\])([^\s&,;]+)",
            r"\1[REDACTED]",
            redacted,
            flags=re.IGNORECASE,
        )

    return redacted


def mask_token(token: Optional[str]) -> str:
    """Show only the last four characters of a token."""
    if not token:
        return "<unset>"
    if len(token) <= 8:
        return "****"
    return f"****{token[-4:]}"
