"""Data models for StudyNote."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from .editor import NoteEditor

if TYPE_CHECKING:
    from .selection import SelectionRange


@dataclass
class Segment:
    id: str
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Segment":
        return cls(id=str(data["id"]), text=str(data["text"]))


@dataclass
class Note:
    id: str
    segment_id: str
    start_offset: int
    end_offset: int
    content: str
    created_at: str
    updated_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "segmentId": self.segment_id,
            "startOffset": self.start_offset,
            "endOffset": self.end_offset,
            "content": self.content,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Note":
        return cls(
            id=str(data["id"]),
            segment_id=str(data["segmentId"]),
            start_offset=int(data.get("startOffset", 0)),
            end_offset=int(data.get("endOffset", 0)),
            content=str(data["content"]),
            created_at=str(data.get("createdAt", "")),
            updated_at=str(data.get("updatedAt", "")),
        )


@dataclass
class SelectionInfo:
    segment_id: str
    start_offset: int
    end_offset: int
    text: str
    range: Optional["SelectionRange"] = None


@dataclass
class PersistedState:
    title: Optional[str] = None
    segments: Optional[List[Segment]] = None
    notes: Optional[Dict[str, Note]] = None


@dataclass
class AppState:
    title: str
    segments: List[Segment] = field(default_factory=list)
    notes: Dict[str, Note] = field(default_factory=dict)
    active_segment_id: Optional[str] = None
    editor: NoteEditor = field(default_factory=NoteEditor)
    selection: Optional[SelectionInfo] = None

    def find_segment(self, segment_id: str) -> Optional[Segment]:
        for segment in self.segments:
            if segment.id == segment_id:
                return segment
        return None

    def note_for(self, segment_id: str) -> Optional[Note]:
        return self.notes.get(segment_id)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "segments": [seg.to_dict() for seg in self.segments],
            "notes": {key: note.to_dict() for key, note in self.notes.items()},
        }
