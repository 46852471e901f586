"""
Shared Kernel

Building blocks reused by every LocalGrid app: domain events and value
objects, the domain error hierarchy, the unit of work and the message bus
that publishes events after a transaction commits.
"""
