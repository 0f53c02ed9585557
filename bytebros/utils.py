import html
from typing import Optional
import bleach


def normalize_email(email: str) -> str:
    """E-mail is the case-insensitive login key; store and look it up lowercased."""
    return email.strip().lower()


def clean_text(value: Optional[str]) -> Optional[str]:
    """Strip markup from free text submitted through public forms.

    - Removes NULL bytes
    - Strips HTML tags using bleach.clean(..., strip=True)
    - Unescapes the entities bleach adds, so '&' and '<' are stored as typed
    - Trims whitespace; blank input becomes None
    """
    if value is None:
        return None
    val = value.replace("\x00", "")
    val = bleach.clean(val, tags=set(), strip=True)
    val = html.unescape(val).strip()
    return val or None
