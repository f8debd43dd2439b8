"""Relational entity store schema and queries.

The tables mirror the external user store: one ``users`` row per federated
user, plus role reference rows joined through association tables. Role
references are plain names and are never checked against the host realm, so
they may point at clients or roles that no longer exist.
"""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    ForeignKey,
    Integer,
    Select,
    String,
    Table,
    Text,
    func,
    or_,
    select,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class UserStoreBase(DeclarativeBase):
    """Declarative base for the external user store."""
    pass


users_to_client_roles = Table(
    "users_to_client_roles",
    UserStoreBase.metadata,
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("client_role_id", ForeignKey("client_roles.id", ondelete="CASCADE"), primary_key=True),
)

users_to_realm_roles = Table(
    "users_to_realm_roles",
    UserStoreBase.metadata,
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("realm_role_id", ForeignKey("realm_roles.id", ondelete="CASCADE"), primary_key=True),
)


class ClientRoleEntity(UserStoreBase):
    """Reference to a role defined on a host client."""

    __tablename__ = "client_roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    client: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<ClientRoleEntity {self.client}.{self.role}>"


class RealmRoleEntity(UserStoreBase):
    """Reference to a realm-level role."""

    __tablename__ = "realm_roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<RealmRoleEntity {self.role}>"


class UserEntity(UserStoreBase):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    username: Mapped[Optional[str]] = mapped_column(String(255), index=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), index=True)
    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # method$salt$digest, None when no password is configured
    password_hash: Mapped[Optional[str]] = mapped_column(Text)
    first_name: Mapped[Optional[str]] = mapped_column("firstName", String(255))
    last_name: Mapped[Optional[str]] = mapped_column("lastName", String(255))
    # epoch milliseconds
    created_timestamp: Mapped[Optional[int]] = mapped_column("createdTimestamp", BigInteger)

    client_roles: Mapped[List[ClientRoleEntity]] = relationship(
        secondary=users_to_client_roles,
        order_by=ClientRoleEntity.id,
    )
    realm_roles: Mapped[List[RealmRoleEntity]] = relationship(
        secondary=users_to_realm_roles,
        order_by=RealmRoleEntity.id,
    )

    def __repr__(self) -> str:
        return f"<UserEntity {self.id} username={self.username!r}>"


# ─────────────────────────────────────────────────────────────────────────────
# Named queries
# ─────────────────────────────────────────────────────────────────────────────

def user_by_username(username: str) -> Select:
    """Exact-match lookup by username."""
    return select(UserEntity).where(UserEntity.username == username)


def user_by_email(email: str) -> Select:
    """Exact-match lookup by email."""
    return select(UserEntity).where(UserEntity.email == email)


def user_count() -> Select:
    return select(func.count()).select_from(UserEntity)


def all_users() -> Select:
    return select(UserEntity).order_by(UserEntity.username)


def search_for_user(pattern: str) -> Select:
    """Match ``pattern`` against the lowered username or the raw email.

    LIKE is case-sensitive on SQLite engines built by :class:`Database`, so
    only the username side ignores case.

    Args:
        pattern: SQL LIKE pattern, already lowered and wildcarded

    Returns:
        Select ordered by username ascending
    """
    return (
        select(UserEntity)
        .where(or_(func.lower(UserEntity.username).like(pattern), UserEntity.email.like(pattern)))
        .order_by(UserEntity.username)
    )
