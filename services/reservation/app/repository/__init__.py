"""Store access helpers for bookings, schedule blocks, fields and promotions."""
