import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

import config
from database import MongoMenuCatalog, db, get_order_repository
from exceptions import (
    AlreadyTerminal,
    DuplicateOrder,
    EmptyOrder,
    EmptyReason,
    InvalidTransition,
    NotFound,
    OrderStateError,
)
from lifecycle import OrderLifecycleController
from menu import MenuCatalog, StationMapping
from schemas import Order, OrderItem, OrderStatus, PaymentMethod, Station

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Restaurant Order Station API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_controller = OrderLifecycleController(
    repository=get_order_repository(),
    menu=MongoMenuCatalog() if db is not None else MenuCatalog(),
    mapping=StationMapping(config.parse_station_mapping(config.CATEGORY_STATION_MAPPING)),
)


def get_controller() -> OrderLifecycleController:
    return _controller


STATUS_CODES = {
    NotFound: 404,
    EmptyReason: 400,
    EmptyOrder: 400,
    InvalidTransition: 409,
    AlreadyTerminal: 409,
    DuplicateOrder: 409,
}


@app.exception_handler(OrderStateError)
async def order_state_error_handler(request: Request, exc: OrderStateError):
    status_code = STATUS_CODES.get(type(exc), 400)
    logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# ===================== Public Endpoints =====================
@app.get("/")
def root():
    return {"message": "Restaurant Order Station API running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "storage": "memory",
        "connection_status": "Not Connected",
        "collections": []
    }
    try:
        if db is not None:
            response["database"] = "✅ Available"
            response["storage"] = "mongodb"
            response["connection_status"] = "Connected"
            response["collections"] = db.list_collection_names()
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:80]}"
    response["database_url"] = "✅ Set" if config.DATABASE_URL else "❌ Not Set"
    response["database_name"] = "✅ Set" if config.DATABASE_NAME else "❌ Not Set"
    return response


# ===================== Orders =====================
class OrderLine(BaseModel):
    menu_id: str
    quantity: int = Field(..., ge=1)
    name: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    note: Optional[str] = None


class CreateOrderRequest(BaseModel):
    table_id: str = "takeout"
    items: List[OrderLine]
    customer_name: Optional[str] = None
    customer_id: Optional[str] = None
    discount: float = 0.0


class UpdateStatusRequest(BaseModel):
    status: OrderStatus


class VoidOrderRequest(BaseModel):
    reason: str


class CompleteOrderRequest(BaseModel):
    payment_method: Optional[PaymentMethod] = None


class UpdateDiscountRequest(BaseModel):
    discount: float = Field(..., ge=0)


def _snapshot_line(line: OrderLine, controller: OrderLifecycleController) -> OrderItem:
    """Copy name and price from the menu unless the caller supplied them."""
    name, price = line.name, line.price
    if name is None or price is None:
        menu_item = controller.menu.resolve(line.menu_id)
        if menu_item is None:
            raise HTTPException(400, f"Unknown menu item {line.menu_id}")
        name = name if name is not None else menu_item.name
        price = price if price is not None else menu_item.price
    return OrderItem(menu_id=line.menu_id, name=name, quantity=line.quantity, price=price, note=line.note)


@app.post("/orders", response_model=Order)
def create_order(payload: CreateOrderRequest, controller: OrderLifecycleController = Depends(get_controller)):
    if not payload.items:
        raise HTTPException(400, "Cart is empty")
    order = Order(
        table_id=payload.table_id,
        items=[_snapshot_line(line, controller) for line in payload.items],
        customer_name=payload.customer_name,
        customer_id=payload.customer_id,
        discount=payload.discount,
    )
    return controller.place_order(order)


@app.get("/orders", response_model=List[Order])
def list_orders(
    station: Optional[Station] = None,
    active_only: bool = False,
    controller: OrderLifecycleController = Depends(get_controller),
):
    return controller.list_orders(station=station, active_only=active_only)


@app.get("/orders/{order_id}", response_model=Order)
def get_order(order_id: str, controller: OrderLifecycleController = Depends(get_controller)):
    return controller.get_order(order_id)


@app.put("/orders/{order_id}/items/{item_index}/status", response_model=Order)
def update_item_status(
    order_id: str,
    item_index: int,
    payload: UpdateStatusRequest,
    controller: OrderLifecycleController = Depends(get_controller),
):
    return controller.set_item_status(order_id, item_index, payload.status)


@app.put("/orders/{order_id}/stations/{station}/status", response_model=Order)
def update_station_status(
    order_id: str,
    station: Station,
    payload: UpdateStatusRequest,
    controller: OrderLifecycleController = Depends(get_controller),
):
    return controller.set_station_status(order_id, station, payload.status)


@app.delete("/orders/{order_id}/items/{item_index}", response_model=Order)
def remove_order_item(order_id: str, item_index: int, controller: OrderLifecycleController = Depends(get_controller)):
    return controller.remove_item(order_id, item_index)


@app.post("/orders/{order_id}/void", response_model=Order)
def void_order(order_id: str, payload: VoidOrderRequest, controller: OrderLifecycleController = Depends(get_controller)):
    return controller.void_order(order_id, payload.reason)


@app.post("/orders/{order_id}/complete", response_model=Order)
def complete_order(
    order_id: str,
    payload: CompleteOrderRequest,
    controller: OrderLifecycleController = Depends(get_controller),
):
    return controller.complete_order(order_id, payload.payment_method)


@app.put("/orders/{order_id}/discount", response_model=Order)
def update_discount(
    order_id: str,
    payload: UpdateDiscountRequest,
    controller: OrderLifecycleController = Depends(get_controller),
):
    return controller.update_discount(order_id, payload.discount)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
