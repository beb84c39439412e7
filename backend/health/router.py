from typing import Any, Dict
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from backend.orders.repository import OrderStore, get_order_store

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root() -> Dict[str, Any]:
    return {"ok": True}

@router.get("/store")
def health_store(store: OrderStore = Depends(get_order_store)):
    """État du stockage des commandes: backend, nombre de commandes, erreur éventuelle."""
    info = store.health_info()
    return JSONResponse(info, status_code=200 if info.get("ok") else 503)
