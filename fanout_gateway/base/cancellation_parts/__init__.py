"""Implementation modules behind ``fanout_gateway.base.cancellation``."""
