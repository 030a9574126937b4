"""Immutable commit nodes."""

import hashlib
import pickle
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping

ROOT_PARENT = ""


def commit_hash(
    parent: str,
    message: str,
    timestamp: datetime,
    manifest: Mapping[str, str],
) -> str:
    """Compute a content-addressable commit id.

    Hashes the parent id, message, timestamp and a sorted serialization
    of the manifest, so the id is fully determined by those four inputs.
    """
    h = hashlib.sha1()
    h.update(parent.encode())
    h.update(message.encode())
    h.update(timestamp.isoformat().encode())
    h.update(pickle.dumps(sorted(manifest.items()), protocol=4))
    return h.hexdigest()


@dataclass(frozen=True)
class Commit:
    """One snapshot of the tracked files.

    ``manifest`` maps filename to blob id. ``parent`` is ``""`` for the
    root commit.
    """

    id: str
    parent: str
    message: str
    timestamp: datetime
    manifest: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "manifest", MappingProxyType(dict(self.manifest)))

    def __getstate__(self) -> dict:
        state = dict(self.__dict__)
        state["manifest"] = dict(self.manifest)
        return state

    def __setstate__(self, state: dict) -> None:
        for name, value in state.items():
            object.__setattr__(self, name, value)
        object.__setattr__(self, "manifest", MappingProxyType(dict(self.manifest)))

    @classmethod
    def build(
        cls,
        parent: str,
        message: str,
        timestamp: datetime,
        manifest: Mapping[str, str],
    ) -> "Commit":
        """Create a commit whose id is derived from its contents."""
        return cls(
            id=commit_hash(parent, message, timestamp, manifest),
            parent=parent,
            message=message,
            timestamp=timestamp,
            manifest=manifest,
        )

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def is_root(self) -> bool:
        return self.parent == ROOT_PARENT

    def verify(self) -> bool:
        """Whether re-hashing the contents reproduces the id."""
        return self.id == commit_hash(
            self.parent, self.message, self.timestamp, self.manifest
        )
