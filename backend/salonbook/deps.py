# backend/salonbook/deps.py

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from .database import get_db
from .redis_client import redis_client
from .services.scheduling import (
    AppointmentManager,
    AppointmentStore,
    LocalStaffLocks,
    RedisStaffLocks,
    SqlAlchemyStore,
    StaffLocks,
    get_scheduling_config,
)


def get_store(db: Session = Depends(get_db)) -> AppointmentStore:
    return SqlAlchemyStore(db)


@lru_cache
def get_staff_locks() -> StaffLocks:
    """Process-wide staff locks; shared through Redis when configured."""
    timeout = get_scheduling_config().lock_timeout_seconds
    if redis_client is not None:
        return RedisStaffLocks(redis_client, timeout=timeout)
    return LocalStaffLocks(timeout=timeout)


def get_manager(
    store: AppointmentStore = Depends(get_store),
    locks: StaffLocks = Depends(get_staff_locks),
) -> AppointmentManager:
    return AppointmentManager(store, locks)


def get_current_user_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> int:
    """Identity forwarded by the auth gateway."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    try:
        return int(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user identity",
        ) from None
