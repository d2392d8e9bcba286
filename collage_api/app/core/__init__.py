"""Configuration, logging, errors and security primitives."""
