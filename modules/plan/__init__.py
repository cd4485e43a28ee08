from .plan_controller import plan_router
