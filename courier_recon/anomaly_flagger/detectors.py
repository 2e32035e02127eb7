"""Pure outlier detection over normalized shipments. No I/O, easy to unit test."""

import logging
import math
import time
from collections.abc import Sequence

from courier_recon.logging_config import log_event
from courier_recon.schemas.shipment import Carrier, NormalizedShipment

logger = logging.getLogger("courier_recon.anomaly_flagger.detectors")

GroupKey = tuple[Carrier, str, str]


def group_key(shipment: NormalizedShipment) -> GroupKey:
    return (shipment.carrier, shipment.zone, shipment.service)


def percentile_bounds(
    rates: Sequence[float],
    low: float = 0.05,
    high: float = 0.95,
) -> tuple[float, float]:
    """Return (p_low, p_high) by floor index into the ascending rates.

    No interpolation. With the default percentiles and fewer than 20 samples
    the bounds are the minimum and the maximum, so nothing falls outside them.
    """
    ordered = sorted(rates)
    n = len(ordered)
    # A percentile of 1.0 would index one past the end
    return ordered[min(math.floor(n * low), n - 1)], ordered[min(math.floor(n * high), n - 1)]


def detect_rate_outliers(
    group: Sequence[NormalizedShipment],
    min_group_size: int = 5,
    low: float = 0.05,
    high: float = 0.95,
) -> list[bool]:
    """Flag shipments whose per-kg rate falls outside the group's percentile band.

    Only strictly positive rates form the distribution, but every member is
    tested against it. Groups with fewer than ``min_group_size`` positive
    rates are left unflagged.
    """
    rates = [s.per_kg_rate for s in group if s.per_kg_rate > 0]
    if len(rates) < min_group_size:
        return [False] * len(group)

    p_low, p_high = percentile_bounds(rates, low, high)
    return [s.per_kg_rate < p_low or s.per_kg_rate > p_high for s in group]


def is_miscalculated(shipment: NormalizedShipment, charge_outlier: bool) -> bool:
    return shipment.is_overbilled or shipment.flag_roundup_jump or charge_outlier


def detect_outliers(
    shipments: Sequence[NormalizedShipment],
    min_group_size: int = 5,
    low: float = 0.05,
    high: float = 0.95,
) -> list[NormalizedShipment]:
    """Second pass over the combined carrier batch.

    Groups by (carrier, zone, service), sets ``flag_charge_outlier`` from the
    group's rate distribution, then ``flag_miscalculated`` for every shipment.
    Returns new shipment objects in input order; the input is not modified.
    Running it again on its own output gives the same flags.

    Args:
        shipments: Combined normalized shipments from all carriers.
        min_group_size: Fewest positive rates a group needs to be tested.
        low: Lower percentile of the per-kg rate band.
        high: Upper percentile of the per-kg rate band.

    Returns:
        Flagged copies of the shipments, same order as the input.
    """
    start = time.perf_counter()

    groups: dict[GroupKey, list[int]] = {}
    for index, shipment in enumerate(shipments):
        groups.setdefault(group_key(shipment), []).append(index)

    outlier = [False] * len(shipments)
    for indices in groups.values():
        members = [shipments[i] for i in indices]
        for i, flagged in zip(indices, detect_rate_outliers(members, min_group_size, low, high)):
            outlier[i] = flagged

    flagged_shipments = [
        shipment.model_copy(update={
            "flag_charge_outlier": outlier[i],
            "flag_miscalculated": is_miscalculated(shipment, outlier[i]),
        })
        for i, shipment in enumerate(shipments)
    ]

    log_event(
        logger,
        "detect_outliers",
        shipments=len(shipments),
        groups=len(groups),
        charge_outliers=sum(outlier),
        miscalculated=sum(1 for s in flagged_shipments if s.flag_miscalculated),
        duration_ms=round((time.perf_counter() - start) * 1000, 1),
    )
    return flagged_shipments
