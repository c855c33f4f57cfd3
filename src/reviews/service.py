"""
Service des avis clients.

- Avis produit : réservés aux produits effectivement commandés, un par client
  et par produit. La note moyenne du produit ne compte que les avis visibles.
- Avis commande : un seul par commande terminée.
"""
import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from src.core.utils import offset_for, utc_now
from src.orders.models import Order, OrderItem, OrderStatus
from src.products.models import Product
from src.users.models import User
from .exceptions import (
    InvalidReviewException,
    ReviewNotAllowedException,
    ReviewNotFoundException,
    ReviewOrderNotFoundException,
    ReviewProductNotFoundException,
)
from .models import (
    OrderReview,
    OrderReviewCreate,
    OrderReviewRead,
    Review,
    ReviewAdminRead,
    ReviewCreate,
    ReviewModerate,
    ReviewStats,
)

logger = logging.getLogger(__name__)


def to_review_read(review: Review, as_admin: bool = False) -> ReviewAdminRead:
    """Les informations de modération ne sont exposées qu'aux administrateurs."""
    data = ReviewAdminRead.model_validate(review)
    if as_admin:
        data.hidden_by_name = review.hidden_by.name if review.hidden_by else None
    else:
        data.hidden_reason = None
        data.hidden_by_id = None
    data.user_name = review.user.name if review.user else None
    return data


def to_order_review_read(review: OrderReview) -> OrderReviewRead:
    data = OrderReviewRead.model_validate(review)
    data.user_name = review.user.name if review.user else None
    return data


class ReviewService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load_review(self, review_id: int) -> Optional[Review]:
        stmt = select(Review).where(Review.id == review_id).execution_options(populate_existing=True)
        return (await self.db.execute(stmt)).scalars().first()

    async def _recompute_product_rating(self, product_id: int) -> None:
        stmt = select(func.avg(Review.rating), func.count(Review.id)).where(
            Review.product_id == product_id, Review.is_hidden == False  # noqa: E712
        )
        avg, count = (await self.db.execute(stmt)).one()
        product = await self.db.get(Product, product_id)
        if product is None:
            return
        product.avg_rating = round(float(avg), 2) if avg is not None else 0.0
        product.total_reviews = count or 0
        self.db.add(product)

    # --- Avis produit ---

    async def upsert_review(self, user: User, data: ReviewCreate) -> Review:
        ordered = await self.db.execute(
            select(Order.id)
            .join(OrderItem, OrderItem.order_id == Order.id)
            .where(
                Order.id == data.order_id,
                Order.user_id == user.id,
                OrderItem.product_id == data.product_id,
            )
        )
        if ordered.first() is None:
            raise ReviewNotAllowedException("Product not ordered")

        stmt = select(Review).where(Review.user_id == user.id, Review.product_id == data.product_id)
        review = (await self.db.execute(stmt)).scalars().first()
        if review is None:
            review = Review(**data.model_dump(), user_id=user.id)
            logger.info(f"[ReviewService] Nouvel avis de user ID {user.id} sur le produit ID {data.product_id}")
        else:
            for key, value in data.model_dump().items():
                setattr(review, key, value)
            review.updated_at = utc_now()
        self.db.add(review)
        await self.db.flush()

        await self._recompute_product_rating(data.product_id)
        await self.db.commit()
        return await self._load_review(review.id)

    async def get_user_review(self, user_id: int, product_id: int) -> Optional[Review]:
        stmt = select(Review).where(Review.user_id == user_id, Review.product_id == product_id)
        return (await self.db.execute(stmt)).scalars().first()

    async def list_product_reviews(
        self, product_id: int, page: int, per_page: int, include_hidden: bool = False
    ) -> Tuple[List[Review], int]:
        conditions = [Review.product_id == product_id]
        if not include_hidden:
            conditions.append(Review.is_hidden == False)  # noqa: E712
        total = (await self.db.execute(select(func.count(Review.id)).where(*conditions))).scalar_one()
        stmt = (
            select(Review)
            .where(*conditions)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .offset(offset_for(page, per_page))
            .limit(per_page)
        )
        reviews = (await self.db.execute(stmt)).scalars().all()
        return list(reviews), total

    async def get_product_stats(self, product_id: int) -> ReviewStats:
        product = await self.db.get(Product, product_id)
        if product is None:
            raise ReviewProductNotFoundException(product_id)

        stmt = (
            select(Review.rating, func.count(Review.id))
            .where(Review.product_id == product_id, Review.is_hidden == False)  # noqa: E712
            .group_by(Review.rating)
        )
        distribution: Dict[int, int] = {rating: 0 for rating in range(1, 6)}
        for rating, count in (await self.db.execute(stmt)).all():
            distribution[rating] = count
        return ReviewStats(
            avg_rating=product.avg_rating if product.total_reviews else None,
            total_reviews=product.total_reviews,
            rating_distribution=distribution,
        )

    async def moderate_review(self, admin: User, review_id: int, data: ReviewModerate) -> Review:
        review = await self._load_review(review_id)
        if review is None:
            raise ReviewNotFoundException()
        review.is_hidden = data.is_hidden
        review.hidden_reason = data.hidden_reason if data.is_hidden else None
        review.hidden_by_id = admin.id if data.is_hidden else None
        review.updated_at = utc_now()
        self.db.add(review)
        await self.db.flush()

        await self._recompute_product_rating(review.product_id)
        await self.db.commit()
        logger.info(f"[ReviewService] Avis ID {review_id} {'masqué' if data.is_hidden else 'rétabli'} par admin ID {admin.id}")
        return await self._load_review(review_id)

    # --- Avis commande ---

    async def _completed_order(self, user_id: int, order_id: int) -> Order:
        stmt = select(Order).where(
            Order.id == order_id, Order.user_id == user_id, Order.status == OrderStatus.COMPLETED
        )
        order = (await self.db.execute(stmt)).scalars().first()
        if order is None:
            raise ReviewNotAllowedException("Order not found or not completed")
        return order

    async def _load_order_review(self, order_id: int) -> Optional[OrderReview]:
        stmt = select(OrderReview).where(OrderReview.order_id == order_id).execution_options(populate_existing=True)
        return (await self.db.execute(stmt)).scalars().first()

    async def create_order_review(self, user: User, data: OrderReviewCreate) -> OrderReview:
        await self._completed_order(user.id, data.order_id)
        if await self._load_order_review(data.order_id) is not None:
            raise InvalidReviewException("You have already reviewed this order")
        self.db.add(OrderReview(**data.model_dump(), user_id=user.id))
        await self.db.commit()
        logger.info(f"[ReviewService] Avis sur la commande ID {data.order_id} par user ID {user.id}")
        return await self._load_order_review(data.order_id)

    async def update_order_review(self, user: User, order_id: int, data: OrderReviewCreate) -> OrderReview:
        if data.order_id != order_id:
            raise InvalidReviewException("Order ID mismatch")
        await self._completed_order(user.id, order_id)
        review = await self._load_order_review(order_id)
        if review is None or review.user_id != user.id:
            raise ReviewNotFoundException()
        review.rating = data.rating
        review.title = data.title
        review.content = data.content
        review.updated_at = utc_now()
        self.db.add(review)
        await self.db.commit()
        return await self._load_order_review(order_id)

    async def get_order_review(self, user: User, order_id: int) -> Optional[OrderReview]:
        if not user.is_admin:
            order = await self.db.get(Order, order_id)
            if order is None or order.user_id != user.id:
                raise ReviewOrderNotFoundException()
        return await self._load_order_review(order_id)
