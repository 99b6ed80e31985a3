# budget_tracker/core/categorizer.py
OTHER = "Other"

# Checked top to bottom; the first rule with a matching keyword wins.
DEFAULT_RULES = (
    ("Groceries", ("woolworths", "coles", "aldi")),
    ("Transportation", ("uber", "lyft", "bus", "train")),
    ("Entertainment", ("netflix", "spotify", "cinema")),
    ("Utilities", ("electricity", "water", "internet", "phone")),
    ("Dining Out", ("restaurant", "cafe", "bar", "mcdonalds", "kfc")),
)


def rules_from_mapping(categories_map):
    """Build an ordered rule list from a ``{category: [keywords]}`` mapping."""
    rules = []
    for cat, keywords in categories_map.items():
        if isinstance(keywords, str) or not hasattr(keywords, '__iter__'):
            raise ValueError(f"Keywords for category '{cat}' must be a list")
        lowered = tuple(str(kw).strip().lower() for kw in keywords)
        if not all(lowered):
            raise ValueError(f"Keywords for category '{cat}' must not be empty")
        rules.append((str(cat), lowered))
    return tuple(rules)


def categorize(description, rules=DEFAULT_RULES):
    name = (description or "").lower()
    for cat, keywords in rules:
        for kw in keywords:
            if kw.lower() in name:
                return cat
    return OTHER
