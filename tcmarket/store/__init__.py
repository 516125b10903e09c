"""
TCMarket - Data store queries

Thin async query functions over the remote tables. Each takes an
AsyncSession and returns engine value types. Errors propagate; the service
layer decides what a failure means for the caller.
"""
