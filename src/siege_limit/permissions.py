"""Capability registry consulted before placement checks run."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict

IGNORE = "siegelimit.ignore"

PERMISSIONS = (IGNORE,)


class PermissionRegistry:
    """Registered permission names and per-user grants."""

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("siege_limit.permissions")
        self._lock = threading.Lock()
        self._registered: set[str] = set()
        self._grants: defaultdict[str, set[str]] = defaultdict(set)

    def register(self, permission: str) -> None:
        with self._lock:
            self._registered.add(permission.lower())

    def register_all(self, permissions=PERMISSIONS) -> None:
        for permission in permissions:
            self.register(permission)

    def is_registered(self, permission: str) -> bool:
        return permission.lower() in self._registered

    def grant(self, user_id: str, permission: str) -> None:
        if not self.is_registered(permission):
            raise KeyError(f"Unknown permission: {permission}")
        with self._lock:
            self._grants[user_id].add(permission.lower())

    def revoke(self, user_id: str, permission: str) -> None:
        with self._lock:
            self._grants.get(user_id, set()).discard(permission.lower())

    def user_has_permission(self, user_id: str, permission: str) -> bool:
        if not self.is_registered(permission):
            self._logger.warning("permission_not_registered", extra={"permission": permission})
            return False
        with self._lock:
            return permission.lower() in self._grants.get(user_id, ())
