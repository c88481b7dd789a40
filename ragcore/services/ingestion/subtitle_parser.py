"""WebVTT caption-track parser.

Turns a ``.vtt`` subtitle file into one plain-text document with a
timestamp prefix on every cue, ready for the chunker::

    WEBVTT

    00:00:01.000 --> 00:00:04.000 align:start
    Hello <b>world</b> &amp; welcome

becomes ``[00:00:01.000 --> 00:00:04.000 align:start] Hello world & welcome``.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path

import structlog

logger = structlog.get_logger(logger_name=__name__)

_HEADER_LINE = re.compile(r"^WEBVTT.*$", re.MULTILINE)
_METADATA_LINES = re.compile(r"^(?:NOTE|STYLE|REGION)\b.*$", re.MULTILINE)

# Hours are optional in WebVTT timestamps (MM:SS.mmm is valid).
_TIMESTAMP = r"(?:\d{2,}:)?\d{2}:\d{2}\.\d{3}"
_CUE = re.compile(
    rf"^({_TIMESTAMP}[ \t]+-->[ \t]+{_TIMESTAMP}(?:[ \t]+[^\n]+)?)[ \t]*\n([^\n]+(?:\n[^\n]+)*)",
    re.MULTILINE,
)
_TAG = re.compile(r"<[^>]*>")

# &amp; is decoded last so "&amp;lt;" yields "&lt;" rather than "<".
_ENTITIES = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&amp;", "&"),
)


def _clean_cue_text(raw: str) -> str:
    text = _TAG.sub("", raw)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    lines = (line.strip() for line in text.split("\n"))
    return " ".join(line for line in lines if line)


def parse_vtt(raw: str) -> str:
    """Return the normalized ``[timestamp] text`` lines of a WebVTT document.

    Cues whose text is empty once markup is removed are dropped.  A track
    with no cues yields ``""``.
    """
    content = raw.replace("\r\n", "\n").replace("\r", "\n")
    content = _HEADER_LINE.sub("", content, count=1)
    content = _METADATA_LINES.sub("", content).strip()

    blocks: list[str] = []
    for match in _CUE.finditer(content):
        timestamp = match.group(1).strip()
        text = _clean_cue_text(match.group(2))
        if text:
            blocks.append(f"[{timestamp}] {text}")
    return "\n".join(blocks)


class SubtitleParser:
    """Reads ``.vtt`` files off the event loop and normalizes them."""

    def parse(self, raw: str) -> str:
        return parse_vtt(raw)

    async def parse_file(self, path: str) -> str:
        raw = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
        text = parse_vtt(raw)
        logger.info(
            "subtitle_parsed",
            path=path,
            cues=text.count("\n") + 1 if text else 0,
            text_length=len(text),
        )
        return text
