"""URL and header construction for Dodgeball API requests."""

from typing import Optional


_ABSENT_VALUES = frozenset({"", "null", "undefined"})


def construct_api_url(url: str, version: str) -> str:
    """Join the base URL and API version with exactly one slash between them.

    The result always ends with ``/`` so endpoint paths can be appended.
    """
    return f"{url.rstrip('/')}/{version}/"


def _is_present(value: Optional[str]) -> bool:
    return value is not None and str(value) not in _ABSENT_VALUES


def construct_api_headers(
    token: str,
    verification_id: Optional[str] = "",
    source_token: Optional[str] = "",
    customer_id: Optional[str] = "",
    session_id: Optional[str] = "",
) -> dict[str, str]:
    """Build request headers, omitting any identifier that is absent."""
    headers = {"Dodgeball-Secret-Key": f"{token}"}

    optional_headers = {
        "Dodgeball-Verification-Id": verification_id,
        "Dodgeball-Source-Token": source_token,
        "Dodgeball-Customer-Id": customer_id,
        "Dodgeball-Session-Id": session_id,
    }
    for name, value in optional_headers.items():
        if _is_present(value):
            headers[name] = f"{value}"

    return headers
