"""Order notification relay: queue-driven push dispatch and the delivery-cost API."""

__version__ = "0.1.0"
