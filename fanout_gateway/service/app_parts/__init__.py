"""Helpers backing ``fanout_gateway.service.app``."""
