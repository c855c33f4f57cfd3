"""
Point d'enregistrement des tables SQLModel.

Importer ce module garantit que toutes les tables sont présentes dans
`SQLModel.metadata` avant un `create_all`.
"""
from src.users.models import User  # noqa: F401
from src.auth.models import PersonalAccessToken, UserSession  # noqa: F401
from src.addresses.models import Address  # noqa: F401
from src.categories.models import Category  # noqa: F401
from src.brands.models import Brand  # noqa: F401
from src.tags.models import ProductTagLink, Tag  # noqa: F401
from src.products.models import Product  # noqa: F401
from src.cart.models import Cart, CartItem  # noqa: F401
from src.promo_codes.models import PromoCode, PromoCodeExcludedUser, PromoCodeUserAssignment  # noqa: F401
from src.store_settings.models import StoreSetting  # noqa: F401
from src.orders.models import Order, OrderItem, OrderStatusHistory  # noqa: F401
from src.reviews.models import OrderReview, Review  # noqa: F401
from src.branches.models import Branch, BranchBusinessHours, BranchContact, BranchSection  # noqa: F401
