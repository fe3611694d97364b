"""User lookup."""

from fastapi import APIRouter, Depends, HTTPException

from factory import ServiceFactory
from adapters.rest.dependencies import get_factory
from adapters.rest.schemas import UserOut

router = APIRouter(tags=["users"])


@router.get("/user/{user_id}", response_model=UserOut)
async def get_user(
    user_id: int,
    factory: ServiceFactory = Depends(get_factory),
):
    user = await factory.create_user_repository().get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserOut.from_entity(user)
