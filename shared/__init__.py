"""
Shared kernel

Value objects, domain errors, the unit of work and the message bus used
by the facility and reservation apps.
"""
