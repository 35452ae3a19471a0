# sitegen/utils/html_extract.py
# Pull a single HTML document out of a free-form model reply

from __future__ import annotations

import re
from dataclasses import dataclass

CODE_BLOCK_RE = re.compile(r"```(?:html)?\s*([\s\S]*?)\s*```", re.IGNORECASE)
DOCTYPE_RE = re.compile(r"<!DOCTYPE html>", re.IGNORECASE)


@dataclass(frozen=True)
class ExtractedHtml:
    """Result of extract_html().

    from_code_block is False when the whole reply was used as-is;
    stripped_preamble is True when prose before <!DOCTYPE html> was dropped.
    """
    html: str
    from_code_block: bool
    stripped_preamble: bool = False


def extract_html(raw: str) -> ExtractedHtml:
    """Best-effort extraction: fenced block -> raw fallback -> cut before doctype -> trim."""
    match = CODE_BLOCK_RE.search(raw)
    candidate = match.group(1) if match else raw

    stripped = False
    doctype = DOCTYPE_RE.search(candidate)
    if doctype and doctype.start() > 0:
        candidate = candidate[doctype.start():]
        stripped = True

    return ExtractedHtml(
        html=candidate.strip(),
        from_code_block=match is not None,
        stripped_preamble=stripped,
    )
