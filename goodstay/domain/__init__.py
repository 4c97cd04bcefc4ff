"""Domain packages: catalog, checkout, orders and bookings"""
