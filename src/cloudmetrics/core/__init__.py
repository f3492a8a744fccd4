"""Core export pipeline: models, ports and the reporter."""
