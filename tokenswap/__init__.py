"""Token swap calculator: priced token catalog, decimal conversion engine and HTTP driver."""

__version__ = "0.1.0"
