"""
Menu Board — Starter menu loaded by menu_ops.seed_menu() into an empty database
"""

CATEGORIES = [
    {"name": "dumplings", "display_name": "Dumplings", "sort_order": 1},
    {"name": "noodles", "display_name": "Noodles", "sort_order": 2},
    {"name": "rice", "display_name": "Rice Dishes", "sort_order": 3},
    {"name": "snacks", "display_name": "Snacks", "sort_order": 4},
    {"name": "drinks", "display_name": "Drinks", "sort_order": 5},
    {"name": "juices", "display_name": "Fresh Juices", "sort_order": 6},
]

# (name, description, price in cents, category name, sort order, available)
ITEMS = [
    ("Pork Gyoza (6pc)", "Pan-fried with ginger soy", 850, "dumplings", 1, True),
    ("Veggie Dumplings (6pc)", "Steamed cabbage & mushroom", 750, "dumplings", 2, True),
    ("Soup Dumplings (4pc)", "Shanghai-style xiaolongbao", 950, "dumplings", 3, True),
    ("Shrimp Har Gow (4pc)", "Crystal shrimp dumplings", 900, "dumplings", 4, False),
    ("Dan Dan Noodles", "Spicy sesame pork", 1200, "noodles", 1, True),
    ("Cold Sesame Noodles", "Chilled with cucumber", 1000, "noodles", 2, True),
    ("Beef Noodle Soup", "Slow-braised beef, hand-pulled noodles", 1450, "noodles", 3, True),
    ("Wonton Noodle Soup", "Pork & shrimp wontons", 1100, "noodles", 4, True),
    ("Mapo Tofu Rice", "Sichuan-style silken tofu", 1100, "rice", 1, True),
    ("Curry Chicken Rice", "Yellow curry with vegetables", 1250, "rice", 2, True),
    ("Teriyaki Salmon Bowl", "Grilled salmon, steamed rice, pickles", 1550, "rice", 3, True),
    ("Scallion Pancakes", "Crispy layers with dipping sauce", 600, "snacks", 1, True),
    ("Cucumber Salad", "Smashed cucumbers, garlic, chili", 500, "snacks", 2, True),
    ("Edamame", "Sea salt", 450, "snacks", 3, True),
    ("Jasmine Tea", "Hot or iced", 300, "drinks", 1, True),
    ("Oolong Tea", "Hot or iced", 350, "drinks", 2, True),
    ("Thai Iced Tea", "Sweet & creamy", 450, "drinks", 3, True),
    ("Sparkling Water", "Topo Chico", 350, "drinks", 4, True),
    ("Fresh Orange", "Squeezed to order", 500, "juices", 1, True),
    ("Watermelon", "Refreshing & sweet", 550, "juices", 2, True),
    ("Green Juice", "Cucumber, celery, apple, ginger", 650, "juices", 3, True),
]
