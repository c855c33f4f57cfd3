from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db_session
from src.promo_codes.service import PromoCodeService

def get_promo_code_service(session: Annotated[AsyncSession, Depends(get_db_session)]) -> PromoCodeService:
    return PromoCodeService(db=session)

PromoCodeServiceDep = Annotated[PromoCodeService, Depends(get_promo_code_service)]
