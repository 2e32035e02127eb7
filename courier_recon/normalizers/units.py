"""Batch-level weight unit sniffing."""

from collections.abc import Iterable

from courier_recon.schemas.shipment import WeightUnit


def detect_weight_unit(
    weights: Iterable[float],
    *,
    grams_mean_lower: float = 50.0,
    grams_mean_upper: float = 2000.0,
) -> WeightUnit:
    """Guess whether a weight column is in grams or kilograms.

    Only strictly positive samples count. A mean strictly between the two
    bounds reads as grams; anything else, including no samples, as kilograms.
    One export batch uses one unit, so call this once per batch.
    """
    valid = [w for w in weights if w > 0]
    if not valid:
        return WeightUnit.KILOGRAMS

    mean = sum(valid) / len(valid)
    if grams_mean_lower < mean < grams_mean_upper:
        return WeightUnit.GRAMS
    return WeightUnit.KILOGRAMS
