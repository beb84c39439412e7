# backend.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

DATA_DIR = BASE_DIR / "data"

"""
Configuration centrale du backend.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets Stripe, l'URL du frontend et le port d'écoute
- Choisit le stockage des commandes (fichier JSON par défaut, Supabase en option)
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

# Stripe: clé secrète (obligatoire au démarrage), clé publique et secret webhook
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_PUBLISHABLE_KEY = _clean_env(os.getenv("STRIPE_PUBLISHABLE_KEY") or os.getenv("STRIPE_PUBLIC_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")

# Frontend Angular: sert aux URLs de redirection du checkout et au CORS
FRONTEND_URL = _clean_env(os.getenv("FRONTEND_URL") or "http://localhost:4200").rstrip("/")
CORS_ORIGINS = [o.strip() for o in (os.getenv("CORS_ORIGINS") or FRONTEND_URL).split(",") if o.strip()]

PORT = int(os.getenv("PORT") or 4242)

# Frais de port fixes (en dollars) ajoutés à chaque checkout
SHIPPING_COST = 50

# Stockage des commandes
# - "json": un seul fichier JSON (tableau), réécrit à chaque ajout
# - "supabase": table "orders" via le client service-role
ORDER_STORE_BACKEND = _clean_env(os.getenv("ORDER_STORE_BACKEND") or "json").lower()
ORDERS_FILE = Path(_clean_env(os.getenv("ORDERS_FILE") or "") or DATA_DIR / "orders.json")

# Supabase: uniquement pour ORDER_STORE_BACKEND=supabase
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")
SUPABASE_ORDERS_TABLE = _clean_env(os.getenv("SUPABASE_ORDERS_TABLE") or "orders")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")
