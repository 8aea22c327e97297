# utils/order_schema.py
"""
Eingehende Bestell-Payloads.

Eine Bestellung ist entweder eine QR-Bestellung (Menü/Produkt) oder eine
Karten-Bestellung. Das Feld ``type`` unterscheidet beide Formen; fehlt es,
gilt ``qr_order``.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError

from utils.errors import ValidationError


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", str_strip_whitespace=True)


class CustomerInfo(_Payload):
    name: str = Field(min_length=1, max_length=200)
    phone: str = Field(min_length=1, max_length=50)
    address: str = Field(min_length=1, max_length=500)


class OrderItemIn(_Payload):
    item_name: str = Field(min_length=1, alias="itemName")
    category_name: str = Field(default="", alias="categoryName")
    quantity: int = Field(ge=1)
    selected_variants: dict[str, str] = Field(default_factory=dict, alias="selectedVariants")
    # vom Client mitgeschickt, wird ignoriert und neu berechnet
    price: Optional[Any] = None

    @field_validator("selected_variants", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            # null = keine Auswahl für diese Variante
            return {k: v for k, v in value.items() if v is not None}
        return value


class CardOrderRequest(_Payload):
    type: Literal["card_order"]
    customer_info: CustomerInfo = Field(alias="customerInfo")
    card_type: str = Field(min_length=1, alias="cardType")
    card_quantity: int = Field(
        ge=1,
        validation_alias=AliasChoices("cardQuantity", "quantity", "card_quantity"),
    )
    notes: Optional[str] = None
    # Karten-Bestellungen haben keinen QR-Bezug
    qr_code_id: Optional[Any] = Field(default=None, alias="qrCodeId")
    qr_code_owner_id: Optional[Any] = Field(default=None, alias="qrCodeOwnerId")


class QROrderRequest(_Payload):
    type: Literal["qr_order"] = "qr_order"
    qr_code_id: str = Field(min_length=1, alias="qrCodeId")
    customer_info: CustomerInfo = Field(alias="customerInfo")
    items: list[OrderItemIn] = Field(min_length=1)
    notes: Optional[str] = None

    @field_validator("qr_code_id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


OrderRequest = Annotated[Union[CardOrderRequest, QROrderRequest], Field(discriminator="type")]

ORDER_REQUEST = TypeAdapter(OrderRequest)


def _field_path(location: tuple[Any, ...]) -> str:
    # erstes Element ist der Diskriminator-Tag (z. B. "qr_order")
    parts = [str(part) for part in location[1:]] if len(location) > 1 else [str(p) for p in location]
    return ".".join(parts)


def parse_order_request(raw: Any) -> Union[CardOrderRequest, QROrderRequest]:
    """Wandelt den rohen JSON-Body in eine der beiden Bestellformen um."""
    if not isinstance(raw, dict):
        raise ValidationError("Order payload must be a JSON object", [{"field": "body", "message": "Expected object"}])

    data = dict(raw)
    if data.get("type") in (None, ""):
        data["type"] = "qr_order"

    try:
        request = ORDER_REQUEST.validate_python(data)
    except PydanticValidationError as exc:
        fields = [
            {"field": _field_path(tuple(error["loc"])) or "type", "message": error["msg"]}
            for error in exc.errors()
        ]
        raise ValidationError("Invalid order payload", fields) from exc

    if isinstance(request, CardOrderRequest):
        for field, value in (("qrCodeId", request.qr_code_id), ("qrCodeOwnerId", request.qr_code_owner_id)):
            if value not in (None, ""):
                raise ValidationError.invalid(field, "must be empty for card orders")
    return request
