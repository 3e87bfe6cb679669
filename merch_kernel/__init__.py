"""
Merch Kernel

Domain core for the event-merchandise order pricing engine:
- Immutable catalog and rate-table value objects
- Configured-product (deliverable) and order records
- Billable components and items produced by the pricing engine
- Typed exceptions and structured JSON logging
"""

__version__ = "0.1.0"
