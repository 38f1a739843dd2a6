# Overview: Fixed seed list used by `flask system init` and catalog reset.

# (id, name, category, unit, cost_price_cents, selling_price_cents)
DEFAULT_CATALOG = [
    # Breads
    ("1", "CHOCO BREAD", "Bread", "pcs", 200, 500),
    ("2", "HALF MOON", "Bread", "pcs", 200, 500),
    ("3", "SQUASH", "Bread", "pcs", 200, 500),
    ("4", "CHEESEDESAL", "Bread", "pcs", 200, 500),
    ("5", "CHEESEROLL", "Bread", "pcs", 200, 500),
    ("6", "CHOCOLANAY", "Bread", "pcs", 200, 500),
    ("7", "EGGDESAL", "Bread", "pcs", 200, 500),
    ("8", "ENSAYMADA MONGO", "Bread", "pcs", 300, 800),
    ("9", "LOAFBREAD (55)", "Bread", "loaf", 2500, 5500),
    ("10", "LOAFBREAD (45)", "Bread", "loaf", 2000, 4500),
    ("11", "LOAFBREAD (35)", "Bread", "loaf", 1500, 3500),
    ("12", "LOAFBREAD (20)", "Bread", "loaf", 800, 2000),
    ("13", "MONAY", "Bread", "pcs", 200, 500),
    ("14", "MONGO BREAD", "Bread", "pcs", 200, 500),
    ("15", "MUSHROOM", "Bread", "pcs", 200, 500),
    ("16", "PANDESAL (2)", "Bread", "pcs", 80, 200),
    ("17", "PANDESAL (5)", "Bread", "pcs", 200, 500),
    ("18", "PANDESAL (25)", "Bread", "pcs", 1000, 2500),
    ("19", "REBON", "Bread", "pcs", 200, 500),
    ("20", "SPANISH", "Bread", "pcs", 200, 500),
    ("21", "STAR BREAD", "Bread", "pcs", 200, 500),
    ("22", "SWEET DESAL", "Bread", "pcs", 200, 500),
    ("23", "UBE CHEESEROLL", "Bread", "pcs", 300, 800),
    ("24", "COCO BREAD", "Bread", "pcs", 200, 500),
    # Drinks
    ("25", "Coca Cola (Kasalo)", "Beverage", "btl", 1500, 2500),
    ("26", "Coca Cola (1L)", "Beverage", "btl", 2500, 4000),
    ("27", "Coca Cola (1.5L)", "Beverage", "btl", 4500, 7000),
    ("28", "Sprite", "Beverage", "btl", 1200, 2000),
    ("29", "Royal", "Beverage", "btl", 1200, 2000),
    ("30", "Mountain Dew", "Beverage", "btl", 1200, 2000),
    ("31", "Bottled Water", "Beverage", "btl", 800, 1500),
]
