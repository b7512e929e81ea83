"""Configuration, logging, security primitives, errors and database wiring."""
