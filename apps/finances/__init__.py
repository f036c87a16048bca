"""Finances app package.

This app holds the payment ledger: payments captured for bookings and the
refunds appended to them when a paid booking is canceled.
"""
