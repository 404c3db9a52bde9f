"""
ShipSplit v1.0.0

Order-to-shipment allocation and label issuance engine.
"""
__version__ = "1.0.0"
