"""Properties app package.

This app encapsulates the property directory and each property's
availability calendar: per-day availability and prices, blocked ranges and
the booking marks written by the bookings app.
"""
