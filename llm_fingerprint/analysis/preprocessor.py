"""Text Preprocessor & Sanitizer: analysis step 1.

Cleans raw model responses before the heuristics run:
  - Strips <think>...</think> reasoning blocks
  - Cleans Markdown artifacts (emphasis markers, headings)
  - Collapses blank-line runs and per-line indentation
  - Flags empty responses
"""

from __future__ import annotations

import logging
import re

from llm_fingerprint.analysis.types import SanitizationFlag, SanitizedText

logger = logging.getLogger(__name__)

_THINK_PATTERN = re.compile(
    r"<think>(.*?)</think>",
    re.DOTALL | re.IGNORECASE,
)

# ---------------------------------------------------------------------------
# Markdown cleanup patterns
# ---------------------------------------------------------------------------
# **bold**, *italic*, ***both***, __bold__; a "* " bullet marker is left alone
_MD_EMPHASIS = re.compile(r"(\*{1,3}|__)(?=\S)(.+?)(?<=\S)\1")
_MD_HEADING = re.compile(r"^#{1,6}\s+", re.MULTILINE)
_MD_BLANK_LINES = re.compile(r"\n{3,}")
_MD_LINE_WHITESPACE = re.compile(r"^[ \t]+|[ \t]+$", re.MULTILINE)


def preprocess(text: str) -> SanitizedText:
    """Clean a raw response for heuristic analysis.

    Returns:
        SanitizedText with cleaned text and metadata about what was stripped.
    """
    original_text = text or ""

    if not original_text.strip():
        return SanitizedText(
            text="",
            original_text=original_text,
            flag=SanitizationFlag.EMPTY_RESPONSE,
        )

    text = original_text.replace("\r\n", "\n")

    think_content = ""
    think_matches = _THINK_PATTERN.findall(text)
    if think_matches:
        think_content = "\n".join(m.strip() for m in think_matches)
        text = _THINK_PATTERN.sub("", text).strip()
        if not text:
            return SanitizedText(
                text="",
                original_text=original_text,
                flag=SanitizationFlag.EMPTY_RESPONSE,
                think_content=think_content,
                stripped_chars=len(original_text),
            )

    cleaned = _MD_EMPHASIS.sub(r"\2", text)
    cleaned = _MD_HEADING.sub("", cleaned)
    cleaned = _MD_BLANK_LINES.sub("\n\n", cleaned)
    cleaned = _MD_LINE_WHITESPACE.sub("", cleaned)
    cleaned = cleaned.strip()

    flag = SanitizationFlag.THINK_STRIPPED if think_content else SanitizationFlag.CLEAN

    return SanitizedText(
        text=cleaned,
        original_text=original_text,
        flag=flag,
        think_content=think_content,
        stripped_chars=len(original_text) - len(cleaned),
    )
