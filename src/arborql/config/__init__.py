"""Configuration: hierarchy models, settings sources, logging setup."""
