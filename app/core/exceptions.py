class InventoryError(Exception):
    """Base class for every error raised by the inventory core."""


class InvalidInput(InventoryError, ValueError):
    """Rejected before any I/O, e.g. an empty barcode."""


class NotAvailable(InventoryError):
    """The web lookup explicitly reported the barcode as unknown."""


class LookupFailure(InventoryError):
    """Transport, status or parse failure while talking to the web lookup."""


class StoreError(InventoryError):
    """A write or read against the product/category store failed."""


class ProductNotFound(InventoryError):
    """The product has no store identifier or no longer exists."""
