from washbook.application.ports.geocoder import GeocoderPort


class MockGeocoder(GeocoderPort):
    def __init__(self, address: str | None = "Boulevard Mohammed V, 12, Gueliz, Marrakesh, Morocco") -> None:
        self._address = address
        self.calls: list[tuple[float, float]] = []

    def reverse(self, latitude: float, longitude: float) -> str | None:
        self.calls.append((latitude, longitude))
        return self._address
