from abc import ABC, abstractmethod


class GeocoderPort(ABC):
    @abstractmethod
    def reverse(self, latitude: float, longitude: float) -> str | None:
        """Human-readable address for a coordinate pair, or None if nothing was found."""
        raise NotImplementedError
