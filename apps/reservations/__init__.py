"""Reservations app package.

This app encapsulates the reservation domain: the reservation aggregate and
its status machine, the availability guard that keeps two live reservations
of a venue from overlapping, and the engine that ties pricing, availability
and the payment ledger together. Creation is serialized per venue and every
mutation of a reservation is serialized per reservation.
"""
