from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db_session
from src.products.service import ProductService
from src.tags.dependencies import TagServiceDep

def get_product_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    tag_service: TagServiceDep,
) -> ProductService:
    """Fournit une instance du service produits."""
    return ProductService(db=session, tag_service=tag_service)

ProductServiceDep = Annotated[ProductService, Depends(get_product_service)]
