from .buyer_controller import buyer_router
