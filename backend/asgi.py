"""
ASGI entrypoint: expose `app` for process managers / deployments.

- En production: `uvicorn backend.asgi:app --port 4242` (ou gunicorn avec workers uvicorn).
- La clé Stripe est vérifiée dans le lifespan: sans STRIPE_SECRET_KEY le démarrage échoue
  (uvicorn sort avec son propre code d'échec de démarrage; seul `python -m backend` sort avec 1).
- Les commandes sont écrites dans un seul fichier JSON: un seul process par fichier
  (ou ORDER_STORE_BACKEND=supabase pour plusieurs workers).
"""

from backend.app import app

if __name__ == "__main__":
    # Même comportement que `python -m backend`
    from backend.__main__ import main
    main()
