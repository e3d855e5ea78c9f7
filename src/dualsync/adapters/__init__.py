"""Adapters connecting the domain to the network, the filesystem and the registry."""
