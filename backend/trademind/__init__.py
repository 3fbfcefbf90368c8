"""TradeMind: multi-agent trade shipment processing."""

__version__ = "0.1.0"
