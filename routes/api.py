from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from database import get_db
from models.qrcode import QR_TYPES, QRCode
from models.user import User
from routes.auth import get_current_user
from routes.qr_resolve import serialize_public_qr
from utils.errors import NotFoundError, ValidationError
from utils.qr_generator import landing_url, render_qr_png
from utils.qr_schema import CONTENT_DOCUMENT, QRLink

router = APIRouter(prefix="/qrcodes", tags=["QR-Codes"])

DOCUMENT_FIELDS = ("menu", "products", "vitrine")


class _QRIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("type", check_fields=False)
    @classmethod
    def _known_type(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        qr_type = value.lower().strip()
        if qr_type not in QR_TYPES:
            raise ValueError(f"Unsupported qr type: {qr_type}")
        return qr_type


class CreateQRIn(_QRIn):
    name: str = Field(default="", max_length=255)
    type: str = Field(default="url")
    original_url: Optional[str] = Field(default=None, alias="originalUrl")
    links: list[QRLink] = Field(default_factory=list)
    menu: Optional[dict[str, Any]] = None
    products: Optional[Any] = None
    vitrine: Optional[dict[str, Any]] = None
    foreground_color: str = Field(default="#000000", alias="foregroundColor")
    background_color: str = Field(default="#FFFFFF", alias="backgroundColor")
    primary_color: Optional[str] = Field(default=None, alias="primaryColor")
    accent_color: Optional[str] = Field(default=None, alias="accentColor")
    logo_url: Optional[str] = Field(default=None, alias="logoUrl")


class UpdateQRIn(_QRIn):
    name: Optional[str] = Field(default=None, max_length=255)
    type: Optional[str] = None
    original_url: Optional[str] = Field(default=None, alias="originalUrl")
    links: Optional[list[QRLink]] = None
    menu: Optional[dict[str, Any]] = None
    products: Optional[Any] = None
    vitrine: Optional[dict[str, Any]] = None
    foreground_color: Optional[str] = Field(default=None, alias="foregroundColor")
    background_color: Optional[str] = Field(default=None, alias="backgroundColor")
    primary_color: Optional[str] = Field(default=None, alias="primaryColor")
    accent_color: Optional[str] = Field(default=None, alias="accentColor")
    logo_url: Optional[str] = Field(default=None, alias="logoUrl")


def _checked_document(kind: str, value: Any) -> Any:
    """Prüft ein Inhaltsdokument vor dem Speichern; gespeichert wird die Eingabe."""
    if value is None:
        return None
    data = {"products": value} if kind == "products" and isinstance(value, list) else value
    if not isinstance(data, dict):
        raise ValidationError.invalid(kind, "must be an object")
    try:
        CONTENT_DOCUMENT.validate_python({**data, "kind": kind})
    except PydanticValidationError as exc:
        fields = [
            {"field": ".".join([kind, *(str(part) for part in error["loc"][1:])]), "message": error["msg"]}
            for error in exc.errors()
        ]
        raise ValidationError(f"Invalid {kind} document", fields) from exc
    return data


def _serialize_qr(qr: QRCode) -> dict[str, Any]:
    data = serialize_public_qr(qr)
    data.update(
        {
            "userId": qr.user_id,
            "landingUrl": landing_url(qr.slug),
            "scanHistory": [scan.timestamp.isoformat() for scan in qr.scans],
            "createdAt": qr.created_at.isoformat() if qr.created_at else None,
            "updatedAt": qr.updated_at.isoformat() if qr.updated_at else None,
        }
    )
    return data


def _owned_qr(db: Session, slug: str, user: User) -> QRCode:
    qr = db.scalar(select(QRCode).where(QRCode.slug == slug, QRCode.user_id == user.id))
    if not qr:
        raise NotFoundError("QR code not found")
    return qr


@router.post("", status_code=201)
def create_qr(
    payload: CreateQRIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    values = payload.model_dump(exclude={"links", *DOCUMENT_FIELDS})
    qr = QRCode(
        user_id=user.id,
        links=[link.model_dump() for link in payload.links],
        **values,
    )
    for kind in DOCUMENT_FIELDS:
        setattr(qr, kind, _checked_document(kind, getattr(payload, kind)))

    db.add(qr)
    db.commit()
    db.refresh(qr)
    return _serialize_qr(qr)


@router.get("")
def list_qrs(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = db.scalars(
        select(QRCode).where(QRCode.user_id == user.id).order_by(QRCode.created_at.desc(), QRCode.id.desc())
    ).all()
    return [_serialize_qr(r) for r in rows]


@router.get("/{slug}")
def get_qr(
    slug: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return _serialize_qr(_owned_qr(db, slug, user))


@router.patch("/{slug}")
def update_qr(
    slug: str,
    payload: UpdateQRIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    qr = _owned_qr(db, slug, user)

    changes = payload.model_dump(exclude_unset=True, exclude={"links", *DOCUMENT_FIELDS})
    for field, value in changes.items():
        if value is not None:
            setattr(qr, field, value)
    if payload.links is not None:
        qr.links = [link.model_dump() for link in payload.links]
    # Dokumente: explizites null entfernt den Inhalt
    for kind in DOCUMENT_FIELDS:
        if kind in payload.model_fields_set:
            setattr(qr, kind, _checked_document(kind, getattr(payload, kind)))

    db.commit()
    db.refresh(qr)
    return _serialize_qr(qr)


@router.delete("/{slug}", status_code=204)
def delete_qr(
    slug: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    qr = _owned_qr(db, slug, user)
    db.delete(qr)
    db.commit()
    return Response(status_code=204)


@router.get("/{slug}/image.png")
def qr_image(
    slug: str,
    size: int = 600,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    qr = _owned_qr(db, slug, user)
    png = render_qr_png(
        landing_url(qr.slug),
        fg=qr.foreground_color,
        bg=qr.background_color,
        size=max(128, min(size, 2000)),
    )
    return Response(content=png, media_type="image/png")
