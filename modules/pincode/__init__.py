from .pincode_controller import pincode_router
