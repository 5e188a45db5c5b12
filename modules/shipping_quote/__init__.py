from .shipping_quote_controller import shipping_quote_router
