from fastapi import Depends

from database.db import SessionLocal, time_now_ist


# session factory handed to the classifier and the plan store
# tests override this to point at their own engine
def get_session_factory():
    return SessionLocal


def get_pincode_service(session_factory=Depends(get_session_factory)):
    from modules.pincode.pincode_service import PincodeService

    return PincodeService(session_factory)


def get_plan_store(session_factory=Depends(get_session_factory)):
    from modules.plan.plan_store import PlanStore

    return PlanStore(session_factory)


def get_rate_engine_service(
    pincode_service=Depends(get_pincode_service),
    plan_store=Depends(get_plan_store),
):
    from modules.rate_engine.rate_engine_service import RateEngineService

    return RateEngineService(
        pincode_classifier=pincode_service,
        plan_store=plan_store,
        clock=time_now_ist,
    )
