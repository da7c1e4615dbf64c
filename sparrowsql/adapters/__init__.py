"""Backend adapters, one package per supported client library."""
