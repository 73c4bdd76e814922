"""
Queue Severity Estimator
"""
import math
from typing import Optional

from ferrywatch.models.vessel import QueueEstimate, QueueSeverity, QueueSnapshot
from ferrywatch.prediction.constants import (
    DEFAULT_FERRY_CAPACITY,
    FERRY_CAPACITIES,
    MOTORBIKE_CAR_EQUIVALENT,
    TRUCK_CAR_EQUIVALENT,
)

# Share of a ferry's deck that still counts as a comfortable fit
COMFORTABLE_LOAD = 0.7
LIGHT_QUEUE = 50
MODERATE_QUEUE = 100


def car_equivalent(queue: QueueSnapshot) -> int:
    """Queue size in cars, rounded half up"""
    raw = queue.car + queue.truck * TRUCK_CAR_EQUIVALENT + queue.motorbike * MOTORBIKE_CAR_EQUIVALENT
    return int(math.floor(raw + 0.5))


def ferry_capacity(name: Optional[str]) -> int:
    return FERRY_CAPACITIES.get(name, DEFAULT_FERRY_CAPACITY)


def estimate_queue_severity(queue: QueueSnapshot, ferry_name: Optional[str]) -> QueueEstimate:
    equivalent = car_equivalent(queue)
    capacity = FERRY_CAPACITIES.get(ferry_name) if ferry_name else None

    if capacity:
        loads_needed = math.ceil(equivalent / capacity)

        if loads_needed <= 1 and equivalent <= capacity * COMFORTABLE_LOAD:
            severity, message = QueueSeverity.LOW, "Queue fits comfortably on next ferry"
        elif loads_needed <= 1:
            severity, message = QueueSeverity.MODERATE, "Queue is filling up — arrive early to secure a spot"
        else:
            severity = QueueSeverity.HIGH
            message = f"Queue exceeds capacity — ~{loads_needed} trips needed to clear"

        return QueueEstimate(
            car_equivalent=equivalent,
            ferry_capacity=capacity,
            loads_needed=loads_needed,
            severity=severity,
            message=message,
        )

    # No ferry to compare against, go by raw count
    if equivalent <= LIGHT_QUEUE:
        severity, message = QueueSeverity.LOW, "Light queue"
    elif equivalent <= MODERATE_QUEUE:
        severity, message = QueueSeverity.MODERATE, "Moderate queue — expect some wait"
    else:
        severity, message = QueueSeverity.HIGH, "Heavy queue — expect significant delays"

    return QueueEstimate(car_equivalent=equivalent, severity=severity, message=message)
