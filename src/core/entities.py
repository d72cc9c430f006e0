from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Dict, Any

from core.schemas import LibraryItem


@dataclass
class RankedItem:
    """
    A library item annotated with an LLM-assigned topic.
    The summary is filled in place during summarization.
    """
    topic: str
    library_item: LibraryItem
    summary: str = ""


@dataclass(frozen=True)
class Utterance:
    """
    A single spoken chunk of a speech file.
    """
    idx: str
    text: str
    word_offset: int
    word_count: int
    voice: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "idx": self.idx,
            "text": self.text,
            "wordOffset": self.word_offset,
            "wordCount": self.word_count,
            "voice": self.voice,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Utterance":
        return cls(
            idx=data["idx"],
            text=data["text"],
            word_offset=data["wordOffset"],
            word_count=data["wordCount"],
            voice=data["voice"],
        )


@dataclass(frozen=True)
class SpeechFile:
    """
    Speech-ready representation of an HTML document.
    """
    word_count: int
    language: str
    default_voice: str
    utterances: List[Utterance] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wordCount": self.word_count,
            "language": self.language,
            "defaultVoice": self.default_voice,
            "utterances": [u.to_dict() for u in self.utterances],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpeechFile":
        return cls(
            word_count=data["wordCount"],
            language=data["language"],
            default_voice=data["defaultVoice"],
            utterances=[Utterance.from_dict(u) for u in data.get("utterances", [])],
        )


@dataclass(frozen=True)
class Digest:
    """
    Final digest record written once per job run.
    """
    id: str
    title: str
    content: str
    urls_to_audio: List[str]
    job_state: str
    speech_files: List[SpeechFile]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "urlsToAudio": list(self.urls_to_audio),
            "jobState": self.job_state,
            "speechFiles": [s.to_dict() for s in self.speech_files],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Digest":
        return cls(
            id=data["id"],
            title=data["title"],
            content=data["content"],
            urls_to_audio=list(data.get("urlsToAudio", [])),
            job_state=data["jobState"],
            speech_files=[SpeechFile.from_dict(s) for s in data.get("speechFiles", [])],
        )
