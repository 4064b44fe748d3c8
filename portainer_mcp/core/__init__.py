"""Core infrastructure: configuration, logging, exceptions and the Portainer transport."""
