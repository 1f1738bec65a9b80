"""FastAPI demo service over the gateway core."""
