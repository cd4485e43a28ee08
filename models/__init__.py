from .pincode_mapping import Pincode_Mapping

from .courier import Courier
from .plan import Plan
from .plan_courier_pricing import Plan_Courier_Pricing
from .zone_pricing import Zone_Pricing

from .user import User
