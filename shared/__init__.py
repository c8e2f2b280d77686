"""
Shared Kernel

Base classes and utilities shared by the venue, reservation and finance
contexts: value objects, aggregate/event base classes, the error taxonomy,
the unit of work and the message bus.
"""
