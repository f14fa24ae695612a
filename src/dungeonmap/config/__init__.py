"""Configuration: TOML discovery, section models, unified settings, logging."""
