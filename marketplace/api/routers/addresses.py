from typing import List

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.schemas import AddressIn, AddressOut, AddressUpdate
from marketplace.services.address_service import AddressService

router = APIRouter(prefix="/addresses", tags=["addresses"])


@router.get("/", response_model=List[AddressOut])
def list_addresses(user_id: int = Query(...), db: Session = Depends(get_db)):
    return AddressService(db).list_addresses(user_id)


@router.post("/", response_model=AddressOut, status_code=201)
def create_address(payload: AddressIn, user_id: int = Query(...), db: Session = Depends(get_db)):
    return AddressService(db).create_address(user_id, payload)


@router.post("/{address_id}/default", response_model=AddressOut)
def set_default(address_id: int, user_id: int = Query(...), db: Session = Depends(get_db)):
    return AddressService(db).set_default(user_id, address_id)


@router.delete("/{address_id}", status_code=204)
def delete_address(address_id: int, user_id: int = Query(...), db: Session = Depends(get_db)):
    AddressService(db).delete_address(user_id, address_id)
    return Response(status_code=204)


@router.patch("/{address_id}", response_model=AddressOut)
def update_address(address_id: int, payload: AddressUpdate, user_id: int = Query(...), db: Session = Depends(get_db)):
    return AddressService(db).update_address(user_id, address_id, payload)
