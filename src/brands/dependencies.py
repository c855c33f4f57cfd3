from typing import Annotated

from fastapi import Depends
from fastcrud import FastCRUD
from sqlalchemy.ext.asyncio import AsyncSession

from src.brands.models import Brand
from src.brands.service import BrandService
from src.database import get_db_session

def get_brand_service(session: Annotated[AsyncSession, Depends(get_db_session)]) -> BrandService:
    return BrandService(db=session, brand_crud=FastCRUD(Brand))

BrandServiceDep = Annotated[BrandService, Depends(get_brand_service)]
