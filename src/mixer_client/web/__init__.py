"""Web surface for mixer_client."""
