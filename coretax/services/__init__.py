"""Domain services: one per resource group.

Services receive the verified ``Actor`` on every call, derive the caller's
scope from the resource's ``AccessPolicy`` and raise ``CoreTaxError``
subclasses; they never build HTTP responses.
"""
