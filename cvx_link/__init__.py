"""Client for the KEYENCE CV-X non-procedural Ethernet protocol."""
