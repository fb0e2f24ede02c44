"""core/errors.py – Exception types của service."""


class FoodScoutError(Exception):
    """Base cho mọi lỗi nghiệp vụ."""


class InvalidQuery(FoodScoutError, ValueError):
    """Tham số truy vấn sai định dạng / ngoài phạm vi → HTTP 400."""


class UpstreamFailure(FoodScoutError):
    """Dịch vụ geocoding lỗi hoặc timeout. Luôn được xử lý cục bộ."""
