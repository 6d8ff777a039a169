from .generator import calculate_day_cost, generate_itinerary, get_day_theme

__all__ = ["generate_itinerary", "get_day_theme", "calculate_day_cost"]
