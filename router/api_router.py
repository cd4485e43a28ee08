from fastapi import APIRouter, Depends

from context_manager.context import build_request_context

# routers
from modules.plan import plan_router
from modules.pincode import pincode_router


# create a comming master router for all the routes in the service
CommonRouter = APIRouter(
    prefix="/api/v1",
    dependencies=[Depends(build_request_context)],
)


# add all the routes to the master router
CommonRouter.include_router(plan_router)
CommonRouter.include_router(pincode_router)
