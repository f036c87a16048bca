"""Bookings app package.

This app encapsulates the booking lifecycle: creation against the property
calendar, confirmation, payment, cancellation with refunds, rejection and
completion. Every status change that holds or frees nights is committed in
the same transaction as the calendar update, with row locks and version
checks guarding against concurrent writers.
"""
