"""Reservation service: booking and schedule conflict engine."""
