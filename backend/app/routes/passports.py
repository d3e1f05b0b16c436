from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response
from sqlalchemy.orm import Session

from app.auth.identity import Identity
from app.core.database import get_db
from app.dependencies.auth import get_current_identity
from app.schemas.passport import PassportListOut, PassportOut
from app.services.passports import (
    create_passport,
    delete_passport,
    export_passport,
    get_passport,
    list_passports,
    update_passport,
)
from app.services.pdf import render_passport_pdf

router = APIRouter(prefix="/passports", tags=["passports"], dependencies=[Depends(get_current_identity)])


@router.post("/", response_model=PassportOut, status_code=201)
def create(
    payload: Any = Body(...),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return create_passport(db, identity, payload)


@router.get("/", response_model=PassportListOut)
def list_(
    page: int = Query(1),
    page_size: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    result = list_passports(db, identity, page=page, page_size=page_size)
    return {
        "items": result.items,
        "current_page": result.current_page,
        "total_pages": result.total_pages,
        "total_count": result.total_count,
    }


@router.get("/{passport_id}", response_model=PassportOut)
def get(
    passport_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return get_passport(db, identity, passport_id)


@router.put("/{passport_id}", response_model=PassportOut)
@router.patch("/{passport_id}", response_model=PassportOut)
def update(
    passport_id: int,
    patch: Any = Body(...),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return update_passport(db, identity, passport_id, patch)


@router.delete("/{passport_id}", status_code=204)
def delete(
    passport_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    delete_passport(db, identity, passport_id)
    return Response(status_code=204)


@router.get("/{passport_id}/pdf")
def download_pdf(
    passport_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    snapshot = export_passport(db, identity, passport_id)
    pdf_bytes = render_passport_pdf(snapshot)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="implant-passport-{snapshot.id}.pdf"'},
    )
