# =============================================================================
# 🧾 routes/orders.py – Bestell-API
# -----------------------------------------------------------------------------
#   POST   /api/orders               → öffentlich (Landingpage / Kartenshop)
#   GET    /api/orders               → Liste mit Filtern & Seiten
#   GET    /api/orders/stats         → Kennzahlen pro Status
#   GET    /api/orders/{id}
#   PATCH  /api/orders/{id}/status   → Statusübergang
#   PATCH  /api/orders/{id}/notes    → interne Notiz
#   DELETE /api/orders/{id}
# =============================================================================

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from database import get_db
from models.user import User
from routes.auth import get_current_user
from utils.order_lifecycle import (
    create_order,
    delete_order,
    get_order,
    list_orders,
    order_stats,
    serialize_order,
    transition_order,
    update_admin_notes,
)

router = APIRouter(prefix="/api/orders", tags=["Orders"])


class StatusIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(min_length=1)
    admin_notes: Optional[str] = Field(default=None, alias="adminNotes")


class NotesIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    admin_notes: Optional[str] = Field(default=None, alias="adminNotes", max_length=5000)


@router.post("", status_code=201)
def post_order(payload: Any = Body(...), db: Session = Depends(get_db)):
    # Validierung & Preisberechnung erfolgen in utils/order_lifecycle.py
    order = create_order(db, payload)
    return serialize_order(order)


@router.get("")
def get_orders(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    status: Optional[str] = Query(default=None),
    search_term: Optional[str] = Query(default=None, alias="searchTerm"),
    order_type: Optional[str] = Query(default=None, alias="orderType"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return list_orders(
        db,
        user,
        page=page,
        limit=limit,
        status=status or None,
        search_term=search_term or None,
        order_type=order_type or None,
    )


@router.get("/stats")
def get_stats(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return order_stats(db, user)


@router.get("/{order_id}")
def get_one(order_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return serialize_order(get_order(db, order_id, user))


@router.patch("/{order_id}/status")
def patch_status(
    order_id: int,
    payload: StatusIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    order = get_order(db, order_id, user)
    order = transition_order(db, order, payload.status, admin_notes=payload.admin_notes)
    return serialize_order(order)


@router.patch("/{order_id}/notes")
def patch_notes(
    order_id: int,
    payload: NotesIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    order = get_order(db, order_id, user)
    return serialize_order(update_admin_notes(db, order, payload.admin_notes))


@router.delete("/{order_id}", status_code=204)
def delete_one(order_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    delete_order(db, get_order(db, order_id, user))
    return Response(status_code=204)
