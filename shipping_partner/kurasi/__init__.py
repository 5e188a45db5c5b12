from .kurasi_controller import kurasi_router
