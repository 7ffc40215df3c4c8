class InventoryError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class RateLimitError(Exception):
    def __init__(self, service: str):
        self.service = service
        self.message = f"Rate limit exceeded for {service}"
        super().__init__(self.message)


class InventoryUnavailableError(Exception):
    """External search failed and the directory had nothing for the location."""

    def __init__(self, location: str):
        self.location = location
        self.message = f"Hotel inventory unavailable for {location}"
        super().__init__(self.message)


class HotelNotFoundError(Exception):
    def __init__(self, hotel_id: str):
        self.hotel_id = hotel_id
        self.message = f"Hotel {hotel_id} not found"
        super().__init__(self.message)


class ItineraryError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
