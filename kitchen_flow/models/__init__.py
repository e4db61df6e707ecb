from kitchen_flow.models.order import OrderRecord
from kitchen_flow.models.station import StationRecord
from kitchen_flow.models.kitchen_timer import KitchenTimerRecord

__all__ = ["OrderRecord", "StationRecord", "KitchenTimerRecord"]
