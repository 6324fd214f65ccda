"""Story title → preview-server story id."""

import re
from typing import Optional

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_TITLE = re.compile(r"""title:\s*['"]([^'"]+)['"]""")


def title_to_identifier(title: str) -> str:
    """``"Generated/My Card!"`` → ``"generated-my-card"``. Pure."""
    return _NON_ALNUM.sub("-", title.lower()).strip("-")


def apply_prefix(title: str, prefix: Optional[str]) -> str:
    if not prefix or title.startswith(prefix):
        return title
    return prefix + title


def extract_title(artifact_text: str) -> Optional[str]:
    m = _TITLE.search(artifact_text)
    return m.group(1) if m else None
