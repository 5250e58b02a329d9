from typing import Protocol


class Port(Protocol):
    """Marker for interfaces implemented by the infrastructure layer."""
