"""Bookings domain - assessment visit requests"""
