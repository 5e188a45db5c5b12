from fastapi import APIRouter, Depends

from context_manager.context import build_request_context

# routers
from modules.customer import customer_router
from modules.buyer import buyer_router
from modules.srn import srn_router
from modules.orders import order_router
from modules.dashboard import dashboard_router
from modules.fees import fee_router
from modules.shipping_quote import shipping_quote_router
from shipping_partner.kurasi import kurasi_router


# create a common master router for all the routes in the service
ApiRouter = APIRouter(
    prefix="/api",
    dependencies=[Depends(build_request_context)],
)


# add all the routes to the master router
ApiRouter.include_router(customer_router)
ApiRouter.include_router(buyer_router)
ApiRouter.include_router(srn_router)
ApiRouter.include_router(order_router)
ApiRouter.include_router(dashboard_router)
ApiRouter.include_router(fee_router)

ApiRouter.include_router(shipping_quote_router)
ApiRouter.include_router(kurasi_router)
