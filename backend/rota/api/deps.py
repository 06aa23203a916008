# ruff: noqa: B008
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header


async def get_actor(x_user_name: str = Header(default="system", min_length=1, max_length=255)) -> str:
    """Name recorded as the author of ledger entries written by this request."""
    return x_user_name.strip() or "system"


ActorDep = Annotated[str, Depends(get_actor)]
