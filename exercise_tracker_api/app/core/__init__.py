"""Configuration, logging, errors and the data store."""
