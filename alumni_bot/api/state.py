# Role: Read-only transparency endpoint for the UI plus a seeding endpoint for local runs.
# Does NOT change any flow logic. Only exposes the current session + profile completion by phone.

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from alumni_bot.api.deps import flow_controller, user_store
from alumni_bot.core.completion_gate import can_access_search
from alumni_bot.models.session import Session
from alumni_bot.models.user_record import UserRecord

router = APIRouter(tags=["state"])


class StateSnapshot(BaseModel):
    phone: str
    registered: bool
    display_name: Optional[str] = None
    completion_percentage: int = 0
    incomplete_fields: List[str] = []
    can_search: bool = False
    session: Dict[str, Any]


@router.get("/state/{phone}", response_model=StateSnapshot)
async def get_state(phone: str) -> StateSnapshot:
    # Key line: a read never creates a session; an unseen phone reports an empty one.
    session = flow_controller.state_manager.get(phone) or Session(phone=phone)
    user = await flow_controller.store.find_by_identity(phone)
    if user is None:
        return StateSnapshot(phone=phone, registered=False, session=session.to_flat())

    access = can_access_search(user)
    return StateSnapshot(
        phone=phone,
        registered=True,
        display_name=user.display_name,
        completion_percentage=access.completion_percentage,
        incomplete_fields=[f.value for f in access.incomplete_fields],
        can_search=access.can_access,
        session=session.to_flat(),
    )


@router.post("/users", response_model=UserRecord, status_code=201)
async def add_user(user: UserRecord) -> UserRecord:
    if await user_store.find_by_identity(user.identity) is not None:
        raise HTTPException(status_code=409, detail="User already exists")
    return user_store.add(user)


@router.delete("/state/{phone}")
def reset_state(phone: str) -> dict:
    flow_controller.state_manager.reset(phone)
    return {"phone": phone, "reset": True}
