from .srn_controller import srn_router
