# Database module for Firestore operations
# Stores generated pitches under users/{owner_id}/pitches/{pitch_id}

import logging
from datetime import datetime, timezone
from typing import List, Optional

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore

from pitchgen.config import MAX_PITCHES_PER_LISTING, Settings, load_settings
from pitchgen.errors import PersistenceError
from pitchgen.models import PitchInput, PitchRecord

logger = logging.getLogger(__name__)


class PitchStore:
    """
    Gateway to the pitch collection.

    The Firestore client is created on first use by connect(), which may be
    called any number of times and returns the same client. There is no
    teardown; the client lives as long as the process.
    """

    def __init__(self, project: Optional[str] = None, database: Optional[str] = None,
                 client: Optional[firestore.Client] = None):
        self.project = project
        self.database = database
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "PitchStore":
        return cls(project=settings.firestore_project, database=settings.firestore_database)

    def connect(self) -> firestore.Client:
        """Get or create the Firestore client."""
        if self._client is None:
            kwargs = {}
            if self.project:
                kwargs["project"] = self.project
            if self.database:
                kwargs["database"] = self.database
            try:
                self._client = firestore.Client(**kwargs)
            except Exception as e:
                raise PersistenceError(f"Could not connect to Firestore: {e}") from e
        return self._client

    def _pitches(self, owner_id: str):
        return self.connect().collection("users").document(owner_id).collection("pitches")

    async def create(self, owner_id: str, title: str, input_data: PitchInput,
                     generated_pitch: str) -> PitchRecord:
        """Persist a newly generated pitch. The owner is fixed at creation."""
        try:
            doc_ref = self._pitches(owner_id).document()
            record = PitchRecord(
                id=doc_ref.id,
                owner_id=owner_id,
                title=title,
                input_data=input_data,
                generated_pitch=generated_pitch,
                created_at=datetime.now(timezone.utc).isoformat(timespec="microseconds"),
            )
            doc_ref.set(record.to_document())
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to save pitch: {e}") from e

        logger.info(f"Saved pitch {record.id} for user {owner_id}")
        return record

    async def list_by_owner(self, owner_id: str,
                            limit: int = MAX_PITCHES_PER_LISTING) -> List[PitchRecord]:
        """List a user's pitches, newest first, never more than MAX_PITCHES_PER_LISTING."""
        limit = max(0, min(limit, MAX_PITCHES_PER_LISTING))
        if limit == 0:
            return []

        try:
            docs = (self._pitches(owner_id)
                    .order_by("created_at", direction=firestore.Query.DESCENDING)
                    .limit(limit)
                    .stream())

            pitches = []
            for doc in docs:
                data = doc.to_dict()
                if data.get("owner_id") != owner_id:
                    continue
                pitches.append(PitchRecord.from_document(doc.id, data))
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to list pitches: {e}") from e

        return pitches

    async def delete_if_owned(self, owner_id: str, pitch_id: str) -> bool:
        """
        Delete a pitch only if it belongs to owner_id.

        Returns False when the pitch does not exist or is owned by someone
        else; the two cases are indistinguishable to the caller. The delete
        is conditioned on the update time of the snapshot whose owner was
        checked, so a document changed in between is left untouched.
        """
        try:
            doc_ref = self._pitches(owner_id).document(pitch_id)
            snapshot = doc_ref.get()
            if not snapshot.exists:
                return False
            if (snapshot.to_dict() or {}).get("owner_id") != owner_id:
                return False

            option = self.connect().write_option(last_update_time=snapshot.update_time)
            doc_ref.delete(option=option)
        except (google_exceptions.FailedPrecondition, google_exceptions.NotFound):
            logger.warning(f"Pitch {pitch_id} changed before it could be deleted")
            return False
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to delete pitch: {e}") from e

        logger.info(f"Deleted pitch {pitch_id} for user {owner_id}")
        return True


# Default store (lazy initialization)
_store = None


def get_store() -> PitchStore:
    """Get or create the process-wide pitch store."""
    global _store
    if _store is None:
        _store = PitchStore.from_settings(load_settings())
    return _store
