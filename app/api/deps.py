"""
Shared API dependencies
"""
from fastapi import Header, HTTPException
from typing import Optional
from uuid import UUID


async def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> UUID:
    """
    Caller identity set by the upstream auth layer

    Raises:
        HTTPException: 401 when the header is missing or not a UUID
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")

    try:
        return UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="X-User-Id must be a UUID")
