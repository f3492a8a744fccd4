"""Adapters connecting the export core to registries, clients and schedulers."""
