"""
Document loading helpers: files on disk to inline base64 payloads.
"""
import base64
import mimetypes
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class DocumentData:
    """A document ready to be sent inline to the AI service."""
    base64: str
    mime_type: str
    name: str

    def to_dict(self):
        return {"base64": self.base64, "mimeType": self.mime_type, "name": self.name}

    @classmethod
    def from_dict(cls, data):
        return cls(base64=data["base64"], mime_type=data["mimeType"], name=data.get("name", ""))


def guess_mime_type(path: str) -> str:
    mime, _ = mimetypes.guess_type(path)
    if mime:
        return mime
    if path.lower().endswith(".md"):
        return "text/markdown"
    return "application/octet-stream"


def load_document(path: str) -> DocumentData:
    """Read a file and wrap it as a DocumentData."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Document not found: {path}")
    with open(path, "rb") as f:
        raw = f.read()
    return DocumentData(
        base64=base64.b64encode(raw).decode("ascii"),
        mime_type=guess_mime_type(path),
        name=os.path.basename(path),
    )


def read_text_file(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()
