from .fee_controller import fee_router
