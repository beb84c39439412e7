"""
Accès aux données pour les commandes.
- OrderStore: interface injectée dans les services (append / find / all).
- JsonFileOrderStore: un seul fichier JSON (tableau), réécrit à chaque ajout.
- SupabaseOrderStore: table "orders" via le client service-role.
"""
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from backend import config
from backend.infra import supabase_client
from backend.payments.models import OrderRecord

logger = logging.getLogger(__name__)

# module backend.orders.repository
class OrderStore(ABC):
    backend = "abstract"

    @abstractmethod
    def append(self, order: OrderRecord) -> None:
        ...

    @abstractmethod
    def all(self) -> List[OrderRecord]:
        ...

    def find_by_session_id(self, session_id: str) -> Optional[OrderRecord]:
        """Parcours linéaire: pas d'index, volume supposé faible."""
        for order in self.all():
            if order.stripe_session_id == session_id:
                return order
        return None

    def health_info(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {"backend": self.backend, "ok": False, "orders": None, "error": None}
        try:
            info["orders"] = len(self.all())
            info["ok"] = True
        except Exception as e:
            info["error"] = str(e)
        return info


# Un verrou par fichier, partagé par toutes les instances du process
_FILE_LOCKS: Dict[str, threading.Lock] = {}
_FILE_LOCKS_GUARD = threading.Lock()

def _lock_for(path: Path) -> threading.Lock:
    key = str(path.resolve())
    with _FILE_LOCKS_GUARD:
        if key not in _FILE_LOCKS:
            _FILE_LOCKS[key] = threading.Lock()
        return _FILE_LOCKS[key]


class JsonFileOrderStore(OrderStore):
    """
    Stockage fichier: lecture complète, ajout, réécriture complète.
    - Les ajouts sont sérialisés par un verrou in-process puis le fichier est
      remplacé atomiquement (fichier temporaire + os.replace).
    - Plusieurs process écrivant le même fichier ne sont pas coordonnés.
    """
    backend = "json"

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = _lock_for(self.path)

    def _read_raw(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return []
        data = json.loads(text)
        if not isinstance(data, list):
            raise ValueError(f"{self.path} ne contient pas un tableau JSON")
        return data

    def _write_raw(self, rows: List[Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".orders-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(rows, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def append(self, order: OrderRecord) -> None:
        with self._lock:
            rows = self._read_raw()
            rows.append(order.to_json())
            self._write_raw(rows)
        logger.info("orders.repository.append order_id=%s session_id=%s total=%s", order.order_id, order.stripe_session_id, len(rows))

    def all(self) -> List[OrderRecord]:
        return [OrderRecord.model_validate(row) for row in self._read_raw()]

    def health_info(self) -> Dict[str, Any]:
        info = super().health_info()
        info["path"] = str(self.path)
        return info


class SupabaseOrderStore(OrderStore):
    """
    Stockage Supabase (table config.SUPABASE_ORDERS_TABLE, colonnes snake_case).
    - Insert-only: pas de read-modify-write côté application.
    - Les erreurs sont journalisées puis propagées (500 côté API).
    """
    backend = "supabase"

    def __init__(self, table: Optional[str] = None):
        self.table = table or config.SUPABASE_ORDERS_TABLE

    def _table(self):
        return supabase_client.get_service_supabase().table(self.table)

    def append(self, order: OrderRecord) -> None:
        try:
            self._table().insert(order.model_dump(mode="json")).execute()
        except Exception:
            logger.exception("orders.repository.supabase append failed order_id=%s", order.order_id)
            raise

    def all(self) -> List[OrderRecord]:
        res = self._table().select("*").order("created_at").execute()
        return [OrderRecord.model_validate(row) for row in (res.data or [])]

    def find_by_session_id(self, session_id: str) -> Optional[OrderRecord]:
        res = self._table().select("*").eq("stripe_session_id", session_id).limit(1).execute()
        rows = res.data or []
        return OrderRecord.model_validate(rows[0]) if rows else None


_store: Optional[OrderStore] = None

def build_order_store() -> OrderStore:
    if config.ORDER_STORE_BACKEND == "supabase":
        return SupabaseOrderStore()
    if config.ORDER_STORE_BACKEND != "json":
        logger.warning("ORDER_STORE_BACKEND=%s inconnu, repli sur le fichier JSON", config.ORDER_STORE_BACKEND)
    return JsonFileOrderStore(config.ORDERS_FILE)

def get_order_store() -> OrderStore:
    """Dépendance FastAPI: instance unique, remplaçable via app.dependency_overrides."""
    global _store
    if _store is None:
        _store = build_order_store()
    return _store
