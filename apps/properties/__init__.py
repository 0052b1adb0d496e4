"""Properties app package.

This app holds the catalog: locations, property types, facilities,
properties, their rooms and the rooms' peak-season rates.
"""
