# atelier/api/routers/users.py
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from atelier.api.deps import get_actor
from atelier.api.errors import http_errors
from atelier.data.database import get_db
from atelier.domain.actor import Actor
from atelier.domain.schemas import AddressCreate, AddressOut, AddressUpdate, UserCreate, UserProfileOut, UserUpdate
from atelier.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserProfileOut, status_code=201)
def create_user(payload: UserCreate, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    with http_errors():
        return UserService(db).create_user(actor, payload.model_dump())


@router.get("/me", response_model=UserProfileOut)
def get_me(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    with http_errors():
        return UserService(db).get_profile(actor, actor.user_id)


@router.patch("/me", response_model=UserProfileOut)
def update_me(payload: UserUpdate, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    with http_errors():
        return UserService(db).update_profile(actor, actor.user_id, payload.model_dump(exclude_unset=True))


@router.get("/me/addresses", response_model=List[AddressOut])
def list_addresses(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    return UserService(db).list_addresses(actor.user_id)


@router.post("/me/addresses", response_model=AddressOut, status_code=201)
def create_address(payload: AddressCreate, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    with http_errors():
        return UserService(db).create_address(actor.user_id, payload.model_dump())


@router.patch("/me/addresses/{address_id}", response_model=AddressOut)
def update_address(
    address_id: str,
    payload: AddressUpdate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    with http_errors():
        return UserService(db).update_address(actor.user_id, address_id, payload.model_dump(exclude_unset=True))


@router.put("/me/addresses/{address_id}/default", response_model=AddressOut)
def set_default_address(address_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    with http_errors():
        return UserService(db).set_default_address(actor.user_id, address_id)


@router.delete("/me/addresses/{address_id}", status_code=204)
def delete_address(address_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    with http_errors():
        UserService(db).delete_address(actor.user_id, address_id)
    return Response(status_code=204)


@router.get("/{user_id}", response_model=UserProfileOut)
def get_user(user_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Owner or admin."""
    with http_errors():
        return UserService(db).get_profile(actor, user_id)
