"""Finances app package.

The payment ledger for reservations: append-only charge and refund entries,
the settlement idempotency store and the payment gateway abstraction
(simulated locally, or Stripe over HTTP when a secret key is configured).
"""
