"""Display name helpers.

Users carry separate first/last names plus a denormalized display ``name``.
Federated providers only give us a full name (or just an email), so the
parts are derived here.
"""

import re

DEFAULT_FIRST_NAME = "User"


def _normalize(value: str | None) -> str:
    return (value or "").strip()


def derive_name_parts(
    first_name: str | None = None,
    last_name: str | None = None,
    full_name: str | None = None,
    email: str | None = None,
) -> tuple[str, str]:
    """Derive (first_name, last_name) from whatever the caller has.

    Precedence: explicit parts, then a full name split on whitespace, then the
    email local part split on ``.``, ``_`` and ``-``. Falls back to ``"User"``.

    Examples:
        >>> derive_name_parts(full_name="Ada  King Lovelace")
        ('Ada', 'King Lovelace')
        >>> derive_name_parts(email="grace.hopper@navy.mil")
        ('grace', 'hopper')
    """
    first = _normalize(first_name)
    last = _normalize(last_name)
    if first or last:
        return first or DEFAULT_FIRST_NAME, last

    full = _normalize(full_name)
    if full:
        parts = full.split()
        return parts[0], " ".join(parts[1:])

    normalized_email = _normalize(email).lower()
    if "@" in normalized_email:
        local = normalized_email.split("@")[0]
        local_parts = [part for part in re.split(r"[._-]+", local) if part]
        if local_parts:
            return local_parts[0], " ".join(local_parts[1:])

    return DEFAULT_FIRST_NAME, ""


def format_display_name(
    first_name: str | None,
    last_name: str | None,
    fallback_email: str | None = None,
) -> str:
    """Join name parts into a display name.

    Falls back to the email, then ``"User"``.
    """
    parts = (_normalize(first_name), _normalize(last_name))
    full = " ".join(part for part in parts if part)
    if full:
        return full
    if fallback_email:
        return fallback_email
    return DEFAULT_FIRST_NAME
