"""Gym check-in kiosk package.

This package is organized by feature modules (members, subscriptions, access,
reports, ...) with a thin Flask controller layer over service/repository layers.
"""
