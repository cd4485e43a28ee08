# tests/conftest.py
import os, sys, tempfile
from datetime import datetime

import pytest
from dotenv import load_dotenv

# project root on path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# keep the app's own engine and log file away from the working tree
TMP_DIR = tempfile.mkdtemp(prefix="rate_engine_tests_")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(TMP_DIR, 'app.db')}")
os.environ.setdefault("LOG_FILE", os.path.join(TMP_DIR, "test.log"))

# load env once
load_dotenv()

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import models  # noqa: F401  registers the tables
from database.db import DBBase
from context_manager.context import context_db_session
from models import Courier, Pincode_Mapping, Plan, Plan_Courier_Pricing, User, Zone_Pricing
from modules.rate_engine.rate_engine_schema import (
    AddressClassificationModel,
    CourierModel,
    CourierPricingModel,
    PlanModel,
    RateRequestModel,
)
from modules.rate_engine.rate_engine_service import RateEngineService
from utils.datetime import IST


# ---------------------------------------------------------------------------
# reference data shared by the in-memory and database fixtures
# ---------------------------------------------------------------------------

ADDRESSES = {
    "110001": dict(pincode=110001, city="new delhi", state="delhi", district="central delhi", is_metro=True),
    "110002": dict(pincode=110002, city="new delhi", state="delhi", district="central delhi", is_metro=True),
    "110085": dict(pincode=110085, city="delhi", state="delhi", district="north west delhi", is_metro=True),
    "400001": dict(pincode=400001, city="mumbai", state="maharashtra", district="mumbai", is_metro=True),
    "781001": dict(pincode=781001, city="guwahati", state="assam", district="kamrup", is_metro=False),
    "841301": dict(pincode=841301, city="chapra", state="bihar", district="saran", is_metro=False),
}

COURIERS = [
    dict(id=1, name="Delhivery Surface", code="delhivery", courier_code="DL_SURFACE",
         type="SURFACE", pickup_time="14:00:00", recommended=True),
    dict(id=2, name="Xpressbees Air", code="xpressbees", courier_code="XB_AIR",
         type="AIR", pickup_time=None),
    dict(id=3, name="Delhivery Reverse", code="delhivery", courier_code="DL_REVERSE",
         type="SURFACE", pickup_time="16:00:00", is_reversed_courier=True),
    dict(id=4, name="Retired Courier", code="retired", courier_code="RT",
         type="SURFACE", is_active=False),
]


def zone(zone, base_price, increment_price, same=True, rto_base_price=0, rto_increment_price=0):
    return dict(
        zone=zone,
        base_price=base_price,
        increment_price=increment_price,
        is_rto_same_as_fw=same,
        rto_base_price=rto_base_price,
        rto_increment_price=rto_increment_price,
    )


PRICINGS = [
    # every zone, RTO mirrors forward
    dict(courier_id=1, weight_slab=0.5, increment_weight=0.5, cod_charge_hard=40, cod_charge_percent=1.5,
         zone_pricing=[zone("Z_A", 30, 10), zone("Z_B", 35, 12), zone("Z_C", 45, 15),
                       zone("Z_D", 55, 18), zone("Z_E", 70, 25)]),
    # no north-east pricing, own RTO tariff
    dict(courier_id=2, weight_slab=1.0, increment_weight=1.0, cod_charge_hard=50, cod_charge_percent=2,
         zone_pricing=[zone(z, b, i, same=False, rto_base_price=50, rto_increment_price=10)
                       for z, b, i in (("Z_A", 40, 20), ("Z_B", 45, 20), ("Z_C", 60, 25), ("Z_D", 80, 30))]),
    dict(courier_id=3, weight_slab=0.5, increment_weight=0.5, cod_charge_hard=40, cod_charge_percent=1.5,
         zone_pricing=[zone(z, 50, 20) for z in ("Z_A", "Z_B", "Z_C", "Z_D", "Z_E")]),
    dict(courier_id=4, weight_slab=0.5, increment_weight=0.5,
         zone_pricing=[zone(z, 1, 1) for z in ("Z_A", "Z_B", "Z_C", "Z_D", "Z_E")]),
]


def build_plan_model(pricings=PRICINGS, plan_id=1, name="Basic") -> PlanModel:
    couriers = {courier["id"]: courier for courier in COURIERS}
    return PlanModel(
        id=plan_id,
        name=name,
        code=f"PL-{name.upper()}",
        is_default=True,
        courier_pricings=[
            CourierPricingModel(**pricing, courier=CourierModel(**couriers[pricing["courier_id"]]))
            for pricing in pricings
        ],
    )


class FakeClassifier:
    """Pincode classifier over a dict, records every lookup"""

    def __init__(self, addresses=None, error=None):
        addresses = ADDRESSES if addresses is None else addresses
        self.addresses = {key: AddressClassificationModel(**value) for key, value in addresses.items()}
        self.error = error
        self.calls = []

    async def classify(self, pincode):
        self.calls.append(pincode)
        if self.error:
            raise self.error
        return self.addresses.get(str(pincode))


class FakePlanStore:
    def __init__(self, plans=None, user_plans=None, default_plan=None):
        self.plans = plans or {}
        self.user_plans = user_plans or {}
        self.default_plan = default_plan

    async def get_plan(self, plan_id):
        return self.plans.get(plan_id)

    async def get_user_plan(self, user_id):
        return self.user_plans.get(user_id, self.default_plan)


# ---------------------------------------------------------------------------
# engine fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def fixed_now():
    # before every configured pickup cutoff
    return IST.localize(datetime(2026, 1, 15, 10, 0, 0))


@pytest.fixture
def basic_plan():
    return build_plan_model()


@pytest.fixture
def make_request():
    def _make_request(**overrides):
        data = dict(
            pickup_pincode="110001",
            delivery_pincode="400001",
            weight=1.2,
            weight_unit="kg",
            box_length=10,
            box_width=10,
            box_height=10,
            size_unit="cm",
            payment_type=0,
            collectable_amount=None,
            is_reversed_order=False,
        )
        data.update(overrides)
        return RateRequestModel(**data)

    return _make_request


@pytest.fixture
def classifier():
    return FakeClassifier()


@pytest.fixture
def plan_store(basic_plan):
    return FakePlanStore(plans={basic_plan.id: basic_plan}, default_plan=basic_plan)


@pytest.fixture
def engine_service(classifier, plan_store, fixed_now):
    return RateEngineService(
        pincode_classifier=classifier,
        plan_store=plan_store,
        clock=lambda: fixed_now,
    )


# ---------------------------------------------------------------------------
# database fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'rate_engine_test.db'}",
        connect_args={"check_same_thread": False},
    )
    DBBase.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


def seed_database(db) -> dict:
    db.add_all(
        [
            Pincode_Mapping(
                pincode=address["pincode"],
                city=address["city"],
                state=address["state"],
                # 841301 comes from an older master without districts
                district=None if address["pincode"] == 841301 else address["district"],
            )
            for address in ADDRESSES.values()
        ]
    )
    db.add_all([Courier(**courier) for courier in COURIERS])
    db.flush()

    def pricing_rows(pricings):
        return [
            Plan_Courier_Pricing(
                **{key: value for key, value in pricing.items() if key != "zone_pricing"},
                zone_pricing=[Zone_Pricing(**row) for row in pricing["zone_pricing"]],
            )
            for pricing in pricings
        ]

    basic = Plan(name="Basic", code="PL-BASIC", is_default=True, features=["cod"])
    basic.courier_pricings = pricing_rows(PRICINGS)

    premium = Plan(name="Premium", code="PL-PREMIUM", is_default=False, features=[])
    premium.courier_pricings = pricing_rows([PRICINGS[1]])

    db.add_all([basic, premium])
    db.flush()

    on_premium = User(name="Asha", email="asha@example.com", plan_id=premium.id)
    without_plan = User(name="Ravi", email="ravi@example.com")
    db.add_all([on_premium, without_plan])
    db.commit()

    return {
        "basic_plan_id": basic.id,
        "premium_plan_id": premium.id,
        "user_on_premium": on_premium.id,
        "user_without_plan": without_plan.id,
    }


@pytest.fixture
def seeded_db(session_factory):
    db = session_factory()
    try:
        return seed_database(db)
    finally:
        db.close()


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    token = context_db_session.set(db)
    yield db
    context_db_session.reset(token)
    db.close()
