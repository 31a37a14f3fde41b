from .generate_ingredients_list import generate_ingredients_list
from .extract_order_from_text import extract_order_from_text

__all__ = ["generate_ingredients_list", "extract_order_from_text"]
