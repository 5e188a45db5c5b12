from .order_controller import order_router
