"""Default configuration for the flocking engine."""
