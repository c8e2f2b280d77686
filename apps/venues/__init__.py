"""Venues app package.

Halls, the bookable venues inside them and the dated pricing overrides
that supersede a venue's base hourly rate. The pricing calculator lives in
``apps.venues.domain.pricing``; hall management rights are exposed to the
reservation engine through the access policy stores.
"""
