"""allocbind - turn server port allocations into container runtime bindings."""

__version__ = "0.1.0"
