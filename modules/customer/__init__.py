from .customer_controller import customer_router
