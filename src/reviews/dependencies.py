from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db_session
from src.reviews.service import ReviewService

def get_review_service(session: Annotated[AsyncSession, Depends(get_db_session)]) -> ReviewService:
    return ReviewService(db=session)

ReviewServiceDep = Annotated[ReviewService, Depends(get_review_service)]
