"""Credential store: persistence of identity records."""

import logging
from datetime import datetime
from typing import Protocol

from sqlalchemy import update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from otp_auth.errors import IdentityExists, StoreUnavailable
from otp_auth.models.identity import Identity

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    def find_by_email(self, email: str) -> Identity | None: ...

    def find_by_id(self, identity_id: int) -> Identity | None: ...

    def create(self, identity: Identity) -> Identity: ...

    def update(self, identity: Identity) -> Identity: ...

    def record_challenge(self, identity_id: int, otp_hash: str, issued_at: datetime) -> bool:
        """Open a new challenge, writing only the challenge columns.

        Other columns (role, names) are left as they are in storage.
        """
        ...

    def consume_challenge(self, identity_id: int, otp_hash: str | None) -> bool:
        """Atomically flip otp_consumed from False to True.

        Only the challenge whose hash is otp_hash can be consumed. Returns
        False when it was already consumed or has been replaced by a newer
        challenge, so of two concurrent redemptions exactly one wins.
        """
        ...


class SqlCredentialStore:
    """CredentialStore backed by a SQLModel engine."""

    def __init__(self, engine: Engine):
        self._engine = engine

    def find_by_email(self, email: str) -> Identity | None:
        try:
            with Session(self._engine) as session:
                return session.exec(select(Identity).where(Identity.email == email)).first()
        except SQLAlchemyError as e:
            logger.error(f"Identity lookup by email failed: {e}")
            raise StoreUnavailable(str(e)) from e

    def find_by_id(self, identity_id: int) -> Identity | None:
        try:
            with Session(self._engine) as session:
                return session.get(Identity, identity_id)
        except SQLAlchemyError as e:
            logger.error(f"Identity lookup by id failed: {e}")
            raise StoreUnavailable(str(e)) from e

    def create(self, identity: Identity) -> Identity:
        try:
            with Session(self._engine) as session:
                session.add(identity)
                session.commit()
                session.refresh(identity)
                return identity
        except IntegrityError as e:
            raise IdentityExists(f"Identity {identity.email!r} already exists") from e
        except SQLAlchemyError as e:
            logger.error(f"Identity create failed: {e}")
            raise StoreUnavailable(str(e)) from e

    def update(self, identity: Identity) -> Identity:
        try:
            with Session(self._engine) as session:
                identity = session.merge(identity)
                session.commit()
                session.refresh(identity)
                return identity
        except SQLAlchemyError as e:
            logger.error(f"Identity update failed: {e}")
            raise StoreUnavailable(str(e)) from e

    def record_challenge(self, identity_id: int, otp_hash: str, issued_at: datetime) -> bool:
        stmt = (
            update(Identity)
            .where(Identity.id == identity_id)
            .values(otp_hash=otp_hash, otp_consumed=False, otp_issued_at=issued_at)
        )
        try:
            with self._engine.begin() as conn:
                result = conn.execute(stmt)
                return result.rowcount == 1
        except SQLAlchemyError as e:
            logger.error(f"Challenge write failed: {e}")
            raise StoreUnavailable(str(e)) from e

    def consume_challenge(self, identity_id: int, otp_hash: str | None) -> bool:
        stmt = (
            update(Identity)
            .where(
                Identity.id == identity_id,
                Identity.otp_hash == otp_hash,
                Identity.otp_consumed == False,  # noqa: E712
            )
            .values(otp_consumed=True)
        )
        try:
            with self._engine.begin() as conn:
                result = conn.execute(stmt)
                return result.rowcount == 1
        except SQLAlchemyError as e:
            logger.error(f"Challenge consume failed: {e}")
            raise StoreUnavailable(str(e)) from e
