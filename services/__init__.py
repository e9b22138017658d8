"""
Services module for Panic Relay Backend.

Contains the realtime registry, notification fan-out and the panic alert pipeline.
"""
