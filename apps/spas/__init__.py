"""Spas app package.

Registry of spas, their services and staff, plus the geolocation search that
feeds customers into the booking flow. Other contexts reach this data only
through ``apps.spas.registry.SpaRegistry`` and hold plain ids.
"""
