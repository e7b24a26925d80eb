"""
Default reminder settings and the localized suggestion tables.
Used when a user has never saved settings, and to complete partially stored ones.
"""

DEFAULT_NOTIFICATION_SETTINGS = {
    "meal_reminders": True,
    "hydration_reminders": True,
    "exercise_reminders": True,
    "progress_reminders": True,
    "activity_reminders": True,

    "meal_times": {
        "breakfast": "08:00",
        "lunch": "13:30",
        "dinner": "21:00",
    },
    "hydration_interval": 2,  # hours
    "exercise_time": "18:00",
    "progress_day": "sunday",

    "notification_channels": {
        "in_app": True,
        "email": True,
        "push": False,
    },
}

DEFAULT_COUNTRY = "United States of America"

# Country -> meal type -> dishes. Only the first entries are ever surfaced.
COUNTRY_MEALS = {
    "United States of America": {
        "breakfast": ["Greek yogurt parfait", "Veggie omelette", "Oatmeal with berries"],
        "lunch": ["Grilled chicken salad", "Turkey whole-wheat wrap", "Quinoa bowl"],
        "dinner": ["Baked salmon with vegetables", "Lean beef stir-fry", "Black bean chili"],
    },
    "India": {
        "breakfast": ["Vegetable poha", "Idli with sambar", "Moong dal chilla"],
        "lunch": ["Dal with brown rice", "Rajma chawal", "Vegetable pulao with raita"],
        "dinner": ["Roti with palak paneer", "Grilled fish curry", "Khichdi with curd"],
    },
    "China": {
        "breakfast": ["Congee with egg", "Steamed vegetable buns", "Soy milk with youtiao"],
        "lunch": ["Steamed fish with rice", "Tofu and vegetable stir-fry", "Chicken noodle soup"],
        "dinner": ["Mapo tofu with greens", "Stir-fried shrimp and broccoli", "Hot pot with lean meats"],
    },
    "United Kingdom": {
        "breakfast": ["Porridge with banana", "Poached eggs on toast", "Kippers with tomatoes"],
        "lunch": ["Jacket potato with beans", "Chicken and leek soup", "Tuna salad sandwich"],
        "dinner": ["Grilled fish with peas", "Shepherd's pie with greens", "Roast chicken and vegetables"],
    },
    "Mexico": {
        "breakfast": ["Huevos rancheros", "Chilaquiles verdes", "Fruit with chia"],
        "lunch": ["Chicken tinga tacos", "Sopa de lima", "Black bean burrito bowl"],
        "dinner": ["Fish tacos with slaw", "Pozole verde", "Grilled chicken with nopales"],
    },
    "Japan": {
        "breakfast": ["Miso soup with rice", "Tamagoyaki", "Natto with rice"],
        "lunch": ["Salmon onigiri", "Soba noodle salad", "Chicken teriyaki bento"],
        "dinner": ["Grilled mackerel set", "Tofu and vegetable nabe", "Chicken yakitori with rice"],
    },
}

# Aliases the user profiles actually carry
COUNTRY_ALIASES = {
    "US": "United States of America",
    "USA": "United States of America",
    "United States": "United States of America",
    "UK": "United Kingdom",
    "GB": "United Kingdom",
    "IN": "India",
    "CN": "China",
    "MX": "Mexico",
    "JP": "Japan",
}

COUNTRY_EXERCISES = {
    "United States of America": ["Gym workout", "Running", "Cycling", "Swimming"],
    "India": ["Yoga", "Brisk walking", "Cricket", "Dancing"],
    "China": ["Tai Chi", "Badminton", "Table tennis", "Jogging"],
    "United Kingdom": ["Football", "Cycling", "Brisk walking", "Swimming"],
    "Mexico": ["Football", "Zumba", "Running", "Cycling"],
    "Japan": ["Radio taiso", "Jogging", "Swimming", "Hiking"],
}


def resolve_country(country) -> str:
    if not country:
        return DEFAULT_COUNTRY
    name = COUNTRY_ALIASES.get(country, country)
    return name if name in COUNTRY_MEALS else DEFAULT_COUNTRY


def get_country_meals(country) -> dict:
    return COUNTRY_MEALS[resolve_country(country)]


def get_country_exercises(country) -> list:
    return COUNTRY_EXERCISES[resolve_country(country)]
