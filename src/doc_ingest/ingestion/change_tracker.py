"""Change tracking: remember which document versions are already ingested.

The state file maps each document identity to the fingerprint of the
content that last made it through embedding *and* storage::

    {"files": {"notes/a.md": "<sha256>", ...}}

Loading never fails: a missing, empty or corrupt file simply means
"nothing ingested yet", which at worst costs a full re-ingest.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from doc_ingest.ingestion.hashing import hash_file
from doc_ingest.ingestion.models import DocumentRecord, IngestState

logger = logging.getLogger(__name__)


class ChangeTracker:
    """Load, query, update and persist :class:`IngestState`.

    Parameters
    ----------
    state_file:
        Location of the JSON state file.  Its parent directory is created
        on the first save.
    """

    def __init__(self, state_file: str | Path) -> None:
        self.state_file = Path(state_file)

    # -- persistence ----------------------------------------------------------

    def load(self) -> IngestState:
        if not self.state_file.exists():
            logger.debug("No state file at %s, starting empty", self.state_file)
            return IngestState()

        try:
            raw = self.state_file.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to read state file %s: %s", self.state_file, exc)
            return IngestState()

        if not raw.strip():
            return IngestState()

        try:
            return IngestState.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Ignoring corrupt state file %s: %s", self.state_file, exc)
            return IngestState()

    def save(self, state: IngestState) -> None:
        """Persist *state* via write-to-temp-then-replace."""
        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(state.model_dump(by_alias=True), indent=2, ensure_ascii=False)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.state_file.parent,
            prefix=f".{self.state_file.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.state_file)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    # -- queries --------------------------------------------------------------

    @staticmethod
    def changed_since(documents: Iterable[DocumentRecord], state: IngestState) -> list[DocumentRecord]:
        """Return the documents that are new or whose content changed, in input order."""
        return [doc for doc in documents if state.fingerprint_of(doc.identity) != doc.fingerprint]

    @staticmethod
    def commit(state: IngestState, document: DocumentRecord) -> IngestState:
        """Return a new state recording *document* as fully ingested."""
        fingerprints = {**state.fingerprints, document.identity: document.fingerprint}
        return IngestState(fingerprints=fingerprints)

    @staticmethod
    def is_removable(document: DocumentRecord, state: IngestState) -> bool:
        """``True`` only when *document* is on disk and already committed unchanged."""
        stored = state.fingerprint_of(document.identity)
        return document.path is not None and stored is not None and stored == document.fingerprint

    # -- input cleanup --------------------------------------------------------

    def prune_unchanged(self, documents: Iterable[DocumentRecord], state: IngestState) -> int:
        """Delete source files that are already ingested and unchanged.

        Returns the number of files removed.  Each file is re-hashed right
        before deletion; one whose bytes no longer match the committed
        fingerprint is kept.  Files that cannot be deleted are logged and
        left in place.
        """
        removed = 0
        for doc in documents:
            if not self.is_removable(doc, state):
                continue
            path: Path = doc.path  # type: ignore[assignment]
            try:
                on_disk = hash_file(path)
            except FileNotFoundError:
                continue
            except OSError as exc:
                logger.warning("Could not re-check %s before removal: %s", doc.identity, exc)
                continue
            if on_disk != state.fingerprint_of(doc.identity):
                logger.info("Keeping %s: modified since it was ingested", doc.identity)
                continue
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                logger.warning("Could not remove %s: %s", doc.identity, exc)
                continue
            logger.info("Removed already-ingested %s", doc.identity)
            removed += 1
        return removed
