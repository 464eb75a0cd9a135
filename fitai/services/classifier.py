# fitai/services/classifier.py
import re
from typing import Optional, Pattern, Tuple

UNKNOWN = "unknown"

CATEGORIES: Tuple[str, ...] = (
    "meat", "fish", "dairy", "vegetable", "fruit", "starch",
    "bread/cereal", "fat/oil", "sweet", "drink", "sauce", UNKNOWN,
)

# Reglas ordenadas: gana la primera con alguna palabra clave al inicio de una palabra
# ("potatoes" casa con "potato"; "boiled" no casa con "oil" ni "champagne" con "ham").
CATEGORY_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("meat", ("chicken", "beef", "pork", "turkey", "ham", "meat", "steak",
              "lamb", "bacon", "sausage", "veal", "duck")),
    ("fish", ("fish", "salmon", "tuna", "cod", "trout", "shrimp", "prawn",
              "sardine", "mackerel", "hake")),
    ("dairy", ("milk", "buttermilk", "yogurt", "yoghurt", "cheese", "cream", "kefir")),
    ("fruit", ("apple", "pineapple", "banana", "orange", "berr", "strawberr",
               "blueberr", "raspberr", "grape", "fruit", "melon", "watermelon",
               "pear", "peach", "mango", "kiwi", "lemon")),
    ("starch", ("potato", "rice", "pasta", "flour", "noodle", "starch",
                "spaghetti", "macaroni")),
    ("bread/cereal", ("bread", "cereal", "baguette", "toast", "croissant",
                      "oat", "muesli", "granola")),
    ("fat/oil", ("oil", "fat", "lard", "margarine", "butter", "ghee")),
    ("sweet", ("cake", "cookie", "sugar", "sweet", "dessert", "chocolate",
               "candy", "honey", "jam")),
    ("drink", ("juice", "cola", "soda", "water", "tea", "coffee", "drink",
               "beer", "wine")),
    ("sauce", ("ketchup", "mayo", "sauce", "dressing", "mustard", "pesto")),
    ("vegetable", ("vegetable", "carrot", "tomato", "broccoli", "onion", "pepper",
                   "spinach", "lettuce", "cucumber", "cabbage", "zucchini", "salad")),
)


def _compile(keywords: Tuple[str, ...]) -> Pattern:
    return re.compile(r"\b(?:" + "|".join(re.escape(k) for k in keywords) + ")")


_PATTERNS = [(category, _compile(keywords)) for category, keywords in CATEGORY_RULES]


def detect_category(name: Optional[str]) -> str:
    """
    Categoría de un alimento a partir de su nombre (función pura).
    Sin coincidencia, o nombre vacío -> 'unknown'.
    """
    n = (name or "").strip().lower()
    if not n:
        return UNKNOWN
    for category, pattern in _PATTERNS:
        if pattern.search(n):
            return category
    return UNKNOWN
