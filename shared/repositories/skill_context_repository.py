"""Skill context data access layer."""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import ValidationError
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from mentor.models.skill_graph import UserSkillContext, initialize_context
from shared.models.entities import SkillContextRecord
from shared.utils.exceptions import StaleStateError

logger = logging.getLogger(__name__)


@dataclass
class StoredSkillContext:
    """A loaded context and the record version it was read at (0 = not stored yet)."""

    context: UserSkillContext
    version: int


class SkillContextRepository:
    """
    Repository for the per-user skill context record.

    Reads never fail observably: a missing or unreadable record yields the
    seed context. Writes are last-writer-wins unless ``strict=True`` is
    passed to ``put``, which turns the write into a compare-and-swap on the
    record version.
    """

    def __init__(self, db: DBSession):
        self.db = db

    def get_record(self, user_id: str) -> Optional[SkillContextRecord]:
        """
        Retrieve the raw record for a user.

        Args:
            user_id: User identifier

        Returns:
            SkillContextRecord if found, None otherwise
        """
        return self.db.query(SkillContextRecord).filter(SkillContextRecord.user_id == user_id).first()

    def get(self, user_id: str) -> StoredSkillContext:
        """
        Load a user's skill context, substituting the seed on any failure.

        Args:
            user_id: User identifier

        Returns:
            StoredSkillContext with the version it was read at
        """
        try:
            record = self.get_record(user_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"Failed to load skill context for {user_id}, using seed: {e}")
            return StoredSkillContext(context=initialize_context(user_id), version=0)

        if record is None:
            logger.info(f"No skill context stored for {user_id}, using seed")
            return StoredSkillContext(context=initialize_context(user_id), version=0)

        try:
            context = UserSkillContext.model_validate_json(record.context_json)
        except ValidationError as e:
            logger.warning(
                f"Stored skill context for {user_id} is unreadable, using seed: {e.error_count()} errors"
            )
            return StoredSkillContext(context=initialize_context(user_id), version=record.version or 0)

        return StoredSkillContext(context=context, version=record.version or 1)

    def put(
        self,
        context: UserSkillContext,
        expected_version: Optional[int] = None,
        strict: bool = False,
    ) -> bool:
        """
        Persist a context, keyed by ``context.id``.

        Args:
            context: Context to store verbatim
            expected_version: Version the caller loaded (from ``get``)
            strict: Refuse to overwrite a record whose version moved on

        Returns:
            True on success, False if the database write failed

        Raises:
            StaleStateError: strict write and the stored version differs
        """
        user_id = context.id
        payload = context.to_record_json()
        try:
            if strict:
                self._compare_and_swap(user_id, payload, expected_version or 0)
            else:
                self._overwrite(user_id, payload, expected_version)
            self.db.commit()
            return True
        except StaleStateError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save skill context for {user_id}: {e}")
            return False

    def _overwrite(self, user_id: str, payload: str, expected_version: Optional[int]) -> None:
        record = self.get_record(user_id)
        if record is None:
            self.db.add(SkillContextRecord(user_id=user_id, context_json=payload, version=1))
            return

        if expected_version is not None and record.version != expected_version:
            logger.warning(
                f"Overwriting skill context for {user_id}: loaded version {expected_version}, "
                f"stored version {record.version}; concurrent updates are lost"
            )
        record.context_json = payload
        record.version = (record.version or 0) + 1
        record.updated_at = datetime.utcnow()

    def _compare_and_swap(self, user_id: str, payload: str, expected_version: int) -> None:
        if expected_version == 0:
            if self.get_record(user_id) is not None:
                raise StaleStateError(f"Skill context for {user_id} was created concurrently")
            try:
                self.db.add(SkillContextRecord(user_id=user_id, context_json=payload, version=1))
                self.db.flush()
            except IntegrityError as e:
                raise StaleStateError(
                    f"Skill context for {user_id} was created concurrently"
                ) from e
            return

        result = self.db.execute(
            update(SkillContextRecord)
            .where(
                SkillContextRecord.user_id == user_id,
                SkillContextRecord.version == expected_version,
            )
            .values(
                context_json=payload,
                version=expected_version + 1,
                updated_at=datetime.utcnow(),
            )
        )
        if result.rowcount == 0:
            raise StaleStateError(
                f"Skill context for {user_id} was modified concurrently (expected version {expected_version})"
            )
