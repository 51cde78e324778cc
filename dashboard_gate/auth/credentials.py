from __future__ import annotations

import hmac


def constant_time_equals(supplied: object, configured: object) -> bool:
    """
    Compare two strings without leaking where they differ or how long they are.

    Both values are zero-padded to the longer length before the timing-safe
    comparison; the length check is done separately so a padded prefix never
    matches. Non-string input fails closed.
    """
    if not isinstance(supplied, str) or not isinstance(configured, str):
        return False

    a = supplied.encode("utf-8")
    b = configured.encode("utf-8")
    size = max(len(a), len(b))

    bytes_match = hmac.compare_digest(a.ljust(size, b"\0"), b.ljust(size, b"\0"))
    return bytes_match and len(a) == len(b)


class CredentialVerifier:
    """Checks a submitted password against the single configured one."""

    def __init__(self, configured: str) -> None:
        self._configured = configured

    def verify(self, supplied: object) -> bool:
        return constant_time_equals(supplied, self._configured)
