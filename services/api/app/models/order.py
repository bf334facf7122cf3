from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CheckoutRequest(BaseModel):
    """JSON checkout body. Every field is optional here so the checkout validator, not the
    schema, decides which rule failed."""

    model_config = ConfigDict(populate_by_name=True)

    nombre: str = ""
    direccion: str = ""
    telefono: str = ""
    pedido: str = ""
    restaurante_id: str = Field("", alias="restauranteId")
    schedule_date: str = Field("", alias="scheduleDate")
    schedule_slot: str = Field("", alias="scheduleSlot")
    precio: str | float | None = None

    @field_validator(
        "nombre",
        "direccion",
        "telefono",
        "pedido",
        "restaurante_id",
        "schedule_date",
        "schedule_slot",
        mode="before",
    )
    @classmethod
    def _coerce_to_text(cls, v: object) -> object:
        # Clients often send the phone as a JSON number, or null for a blank field.
        if v is None:
            return ""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class CheckoutResponse(BaseModel):
    success: bool = True
    message: str
    order_id: int = Field(..., serialization_alias="orderId")


class OrderLineAddRequest(BaseModel):
    plato_id: int
    cantidad: int = Field(1, ge=1, le=99)


class OrderLineOut(BaseModel):
    id: int
    plato_id: int
    plato: str
    precio_centavos: int
    cantidad: int
    subtotal_centavos: int


class OrderOut(BaseModel):
    id: int
    usuario_id: int
    restaurante_id: int | None = None
    restaurante_slug: str
    restaurante: str | None = None
    nombre: str
    pedido: str
    direccion: str
    telefono: str
    fecha: str
    schedule_date: str
    schedule_slot: str
    estado: str
    lineas: list[OrderLineOut] = Field(default_factory=list)
    total_centavos: int


class OrderResponse(BaseModel):
    success: bool = True
    data: OrderOut


class OrderListResponse(BaseModel):
    success: bool = True
    total: int
    data: list[OrderOut]
