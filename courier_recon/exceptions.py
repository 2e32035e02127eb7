"""Error types raised at the edges of the reconciliation core.

Row content never raises: bad dates and numbers fall back to defaults. These
errors cover input that fails a structural precondition.
"""


class CourierReconError(Exception):
    """Base class for courier_recon errors."""


class MissingColumnsError(CourierReconError):
    def __init__(self, carrier: str, missing: list[str]):
        self.carrier = carrier
        self.missing = missing
        super().__init__(f"{carrier} file missing required columns: {', '.join(missing)}")


class CsvFormatError(CourierReconError):
    """Export CSV text does not match the expected column layout."""
