"""Entity models for wsauth."""
