"""Cached user projections and the handle used to reach a live adapter.

A host may serve a user from a read-through snapshot instead of a live
adapter. Reads may use the snapshot; writes must always reach the live
adapter. ``Live`` and ``Cached`` make that distinction explicit, and
``as_mutable()`` is the single way to get something writable.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from .adapter import UserAdapter
from .exceptions import LiveAdapterUnavailableError

PASSWORD_HASH_CACHE_KEY = f"{UserAdapter.__module__}.{UserAdapter.__qualname__}.passwordHash"


@dataclass
class CachedUserModel:
    """Read-through snapshot of a user.

    Attributes:
        id: Composite user id
        cached_with: Extra state published by the provider's cache hook
        delegate_loader: Loads the live adapter for updates
    """
    id: str
    delegate_loader: Callable[[], Optional[UserAdapter]]
    username: Optional[str] = None
    email: Optional[str] = None
    email_verified: bool = False
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    created_timestamp: Optional[int] = None
    attributes: Dict[str, List[Optional[str]]] = field(default_factory=dict)
    cached_with: Dict[str, Any] = field(default_factory=dict)
    invalidated: bool = False

    @classmethod
    def snapshot(cls, adapter: UserAdapter, delegate_loader: Callable[[], Optional[UserAdapter]]) -> "CachedUserModel":
        return cls(
            id=adapter.id,
            delegate_loader=delegate_loader,
            username=adapter.username,
            email=adapter.email,
            email_verified=adapter.email_verified,
            first_name=adapter.first_name,
            last_name=adapter.last_name,
            created_timestamp=adapter.created_timestamp,
            attributes=adapter.get_attributes(),
        )

    def get_delegate_for_update(self) -> Optional[UserAdapter]:
        """Load the live adapter; the snapshot is stale from here on."""
        self.invalidated = True
        return self.delegate_loader()


@dataclass(frozen=True)
class Live:
    adapter: UserAdapter

    def as_mutable(self) -> UserAdapter:
        return self.adapter

    def password_hash(self) -> Optional[str]:
        return self.adapter.password_hash


@dataclass(frozen=True)
class Cached:
    projection: CachedUserModel

    def as_mutable(self) -> UserAdapter:
        """Unwrap to the live adapter behind the projection.

        Raises:
            LiveAdapterUnavailableError: If the delegate is missing or not an adapter
        """
        delegate = self.projection.get_delegate_for_update()
        if not isinstance(delegate, UserAdapter):
            raise LiveAdapterUnavailableError(
                f"No live adapter reachable for cached user {self.projection.id}"
            )
        return delegate

    def password_hash(self) -> Optional[str]:
        """Published hash if present, otherwise the live record's hash.

        Reading through the loader does not invalidate the projection.
        """
        published = self.projection.cached_with.get(PASSWORD_HASH_CACHE_KEY)
        if published is not None:
            return published
        delegate = self.projection.delegate_loader()
        return delegate.password_hash if isinstance(delegate, UserAdapter) else None


UserHandle = Union[Live, Cached]


def user_handle(user: Union[UserAdapter, CachedUserModel, Live, Cached]) -> UserHandle:
    """Wrap a host user object in its tagged variant.

    Raises:
        LiveAdapterUnavailableError: For objects that are neither adapter nor projection
    """
    if isinstance(user, (Live, Cached)):
        return user
    if isinstance(user, UserAdapter):
        return Live(user)
    if isinstance(user, CachedUserModel):
        return Cached(user)
    raise LiveAdapterUnavailableError(f"Unsupported user model: {type(user).__name__}")
