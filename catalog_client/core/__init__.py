"""Core - configuration, logging, exceptions, seed table."""
