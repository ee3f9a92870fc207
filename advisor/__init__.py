"""EcoFarm advisor: prompt framing, client wrapper and health checks."""
