from courier_recon.schemas.kpi import KPISummary, ProblemPin
from courier_recon.schemas.raw import BlueDartRow, DelhiveryRow
from courier_recon.schemas.shipment import Carrier, NormalizedShipment, WeightUnit

__all__ = [
    "BlueDartRow",
    "Carrier",
    "DelhiveryRow",
    "KPISummary",
    "NormalizedShipment",
    "ProblemPin",
    "WeightUnit",
]
