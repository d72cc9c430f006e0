"""
Converts HTML into speech files: ordered utterances with word offsets and voices,
ready to be handed to a text-to-speech synthesizer.
"""
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.element import (
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    PageElement,
    ProcessingInstruction,
)

from core.entities import SpeechFile, Utterance

BLOCK_TAGS = [
    "p", "h1", "h2", "h3", "h4", "h5", "h6",
    "li", "blockquote", "pre", "td", "th", "dt", "dd",
]

INLINE_TAGS = {
    "a", "abbr", "b", "br", "cite", "code", "em", "i", "kbd", "mark",
    "q", "s", "small", "span", "strong", "sub", "sup", "u",
}

SKIPPED_TAGS = {"script", "style", "template"}

_NON_TEXT = (Comment, Declaration, Doctype, ProcessingInstruction)

# Utterances hold at most this many characters; only a single longer word exceeds it
MAX_UTTERANCE_CHARS = 256

_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


@dataclass(frozen=True)
class SpeechOptions:
    primary_voice: str = "en-US-JennyNeural"
    secondary_voice: str = "en-US-GuyNeural"
    language: str = "en-US"


def _split_sentences(text: str) -> List[str]:
    return [s for s in _SENTENCE_END.split(text) if s]


def _split_long(sentence: str) -> List[str]:
    """Break a sentence longer than MAX_UTTERANCE_CHARS on whitespace."""
    if len(sentence) <= MAX_UTTERANCE_CHARS:
        return [sentence]

    pieces: List[str] = []
    current = ""
    for word in sentence.split():
        if current and len(current) + 1 + len(word) > MAX_UTTERANCE_CHARS:
            pieces.append(current)
            current = word
        else:
            current = f"{current} {word}" if current else word
    if current:
        pieces.append(current)
    return pieces


def _pack(sentences: List[str]) -> List[str]:
    chunks: List[str] = []
    current = ""
    for sentence in sentences:
        for piece in _split_long(sentence):
            if current and len(current) + 1 + len(piece) > MAX_UTTERANCE_CHARS:
                chunks.append(current)
                current = piece
            else:
                current = f"{current} {piece}" if current else piece
    if current:
        chunks.append(current)
    return chunks


def _block_of(node: NavigableString, soup: BeautifulSoup) -> PageElement:
    """
    The nearest block-level ancestor of a text node, or else its top-level
    container. Loose text and top-level inline tags share the soup itself,
    so a run of them reads as one block.
    """
    for parent in node.parents:
        if parent.name in BLOCK_TAGS:
            return parent

    top: PageElement = node
    while top.parent is not None and top.parent is not soup:
        top = top.parent
    if isinstance(top, NavigableString) or top.name in INLINE_TAGS:
        return soup
    return top


def _text_blocks(soup: BeautifulSoup) -> List[Tuple[str, bool]]:
    """
    Group text nodes in document order into (text, quoted) blocks.
    """
    blocks: List[Tuple[str, bool]] = []
    current_block: Optional[PageElement] = None
    parts: List[str] = []
    quoted = False

    for node in soup.find_all(string=True):
        if isinstance(node, _NON_TEXT):
            continue
        if any(parent.name in SKIPPED_TAGS for parent in node.parents):
            continue

        block = _block_of(node, soup)
        if block is not current_block:
            if parts:
                blocks.append(("".join(parts), quoted))
            current_block = block
            parts = []
            quoted = any(parent.name == "blockquote" for parent in node.parents)
        parts.append(str(node))

    if parts:
        blocks.append(("".join(parts), quoted))
    return blocks


def html_to_speech_file(html: str, options: Optional[SpeechOptions] = None) -> SpeechFile:
    """
    Split HTML into utterances.

    All text is read in document order, one block at a time: each
    block-level element, unknown top-level container, and run of loose
    text starts a new utterance. Text inside a blockquote is read with
    the secondary voice, everything else with the primary voice.
    """
    options = options or SpeechOptions()
    soup = BeautifulSoup(html or "", "html.parser")

    utterances: List[Utterance] = []
    word_offset = 0
    for raw, quoted in _text_blocks(soup):
        text = " ".join(raw.split())
        if not text:
            continue
        voice = options.secondary_voice if quoted else options.primary_voice
        for chunk in _pack(_split_sentences(text)):
            word_count = len(chunk.split())
            utterances.append(
                Utterance(
                    idx=str(len(utterances)),
                    text=chunk,
                    word_offset=word_offset,
                    word_count=word_count,
                    voice=voice,
                )
            )
            word_offset += word_count

    return SpeechFile(
        word_count=word_offset,
        language=options.language,
        default_voice=options.primary_voice,
        utterances=utterances,
    )
