from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.branches.service import BranchService
from src.database import get_db_session

def get_branch_service(session: Annotated[AsyncSession, Depends(get_db_session)]) -> BranchService:
    return BranchService(db=session)

BranchServiceDep = Annotated[BranchService, Depends(get_branch_service)]
