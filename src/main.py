"""
Module principal de l'application FastAPI de la boutique.

Ce module configure l'instance FastAPI, ajoute le middleware CORS et inclut
les routeurs publics, client et back-office sous le préfixe de l'API.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import settings
from src.database import create_tables

# --- Importer les routeurs ---
from src.auth.router import router as auth_router
from src.users.router import router as user_router, admin_customer_router
from src.addresses.router import router as address_router
from src.categories.router import router as category_router, admin_category_router
from src.brands.router import brand_router, admin_brand_router
from src.tags.router import tag_router, admin_tag_router
from src.products.router import product_router, admin_product_router
from src.cart.router import cart_router
from src.orders.router import order_router, checkout_router, admin_order_router
from src.promo_codes.router import promo_code_router, admin_promo_code_router
from src.reviews.router import (
    review_router,
    product_review_router,
    admin_review_router,
    order_review_router,
    order_review_lookup_router,
)
from src.store_settings.router import admin_settings_router
from src.dashboard.router import admin_dashboard_router
from src.branches.router import branch_router, admin_branch_router

# Configurer le logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Démarrage de l'API: création des tables manquantes")
    await create_tables()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="API de boutique en ligne : catalogue, panier, commandes négociées, codes promo et avis.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ======================================================
# Inclure les routeurs
# ======================================================
api = settings.API_V1_PREFIX

# Authentification et comptes
app.include_router(auth_router, prefix=f"{api}/auth", tags=["Authentification"])
app.include_router(user_router, prefix=f"{api}/users", tags=["Utilisateurs"])
app.include_router(address_router, prefix=f"{api}/addresses", tags=["Adresses"])

# Catalogue
app.include_router(category_router, prefix=f"{api}/categories", tags=["Catégories"])
app.include_router(brand_router, prefix=f"{api}/brands", tags=["Marques"])
app.include_router(tag_router, prefix=f"{api}/tags", tags=["Tags"])
app.include_router(product_router, prefix=f"{api}/products", tags=["Produits"])
app.include_router(product_review_router, prefix=f"{api}/products", tags=["Avis"])

# Panier, commandes et paiement
app.include_router(cart_router, prefix=f"{api}/cart", tags=["Panier"])
app.include_router(order_router, prefix=f"{api}/orders", tags=["Commandes"])
app.include_router(order_review_lookup_router, prefix=f"{api}/orders", tags=["Avis"])
app.include_router(checkout_router, prefix=f"{api}/checkout", tags=["Paiement"])
app.include_router(promo_code_router, prefix=f"{api}/promo-codes", tags=["Codes promo"])
app.include_router(branch_router, prefix=f"{api}/branches", tags=["Succursales"])

# Avis
app.include_router(review_router, prefix=f"{api}/reviews", tags=["Avis"])
app.include_router(order_review_router, prefix=f"{api}/order-reviews", tags=["Avis"])

# Back-office
app.include_router(admin_dashboard_router, prefix=f"{api}/admin/dashboard", tags=["Admin"])
app.include_router(admin_customer_router, prefix=f"{api}/admin/customers", tags=["Admin"])
app.include_router(admin_category_router, prefix=f"{api}/admin/categories", tags=["Admin"])
app.include_router(admin_brand_router, prefix=f"{api}/admin/brands", tags=["Admin"])
app.include_router(admin_tag_router, prefix=f"{api}/admin/tags", tags=["Admin"])
app.include_router(admin_product_router, prefix=f"{api}/admin/products", tags=["Admin"])
app.include_router(admin_order_router, prefix=f"{api}/admin/orders", tags=["Admin"])
app.include_router(admin_promo_code_router, prefix=f"{api}/admin/promo-codes", tags=["Admin"])
app.include_router(admin_review_router, prefix=f"{api}/admin/reviews", tags=["Admin"])
app.include_router(admin_settings_router, prefix=f"{api}/admin/settings", tags=["Admin"])
app.include_router(admin_branch_router, prefix=f"{api}/admin/branches", tags=["Admin"])
