# map_planner/services/place_types.py

# Google Places "Table A" types usable as includedTypes in a Nearby Search
ATTRACTION_TYPES = (
    "tourist_attraction",
    "museum",
    "art_gallery",
    "zoo",
    "aquarium",
    "amusement_park",
    "park",
    "beach",
    "national_park",
    "state_park",
    "monument",
    "historical_place",
    "cultural_landmark",
    "church",
    "hindu_temple",
    "mosque",
    "synagogue",
    "performing_arts_theater",
    "stadium",
    "library",
    "city_hall",
    "casino",
    "adventure_sports_center",
    "sculpture",
    "campground",
    "hiking_area",
    "botanical_garden",
)

RESTAURANT_TYPES = ("restaurant", "cafe", "bar", "bakery")

# Services, lodging and food places that should not surface as attractions
BLOCKED_PLACE_TYPES = frozenset(
    [
        # Automotive
        "car_repair",
        "car_dealer",
        "car_wash",
        "car_rental",
        "gas_station",
        # Shopping
        "store",
        "shopping_mall",
        "convenience_store",
        "supermarket",
        "department_store",
        "clothing_store",
        "shoe_store",
        "electronics_store",
        "furniture_store",
        "hardware_store",
        "home_goods_store",
        "jewelry_store",
        "pet_store",
        # Services
        "electrician",
        "plumber",
        "locksmith",
        "painter",
        "roofing_contractor",
        "lawyer",
        "real_estate_agency",
        "insurance_agency",
        "accounting",
        "travel_agency",
        "moving_company",
        "courier_service",
        # Financial
        "atm",
        "bank",
        # Health
        "dentist",
        "doctor",
        "hospital",
        "pharmacy",
        "veterinary_care",
        # Personal care
        "hair_care",
        "beauty_salon",
        "spa",
        "gym",
        # Utilities
        "laundry",
        "post_office",
        "storage",
        # Lodging
        "lodging",
        "hotel",
        "motel",
        "hostel",
        "resort_hotel",
        "bed_and_breakfast",
        "guest_house",
        "rv_park",
        # Food / drink (searched separately as restaurants)
        "restaurant",
        "cafe",
        "bar",
        "bakery",
        "food",
        "night_club",
    ]
)

# Places with fewer ratings than this are too thin to recommend
MIN_RATING_COUNT = 10

MIN_SEARCH_RADIUS = 100
MAX_SEARCH_RADIUS = 50000


def is_restaurant_search(types) -> bool:
    return bool(types) and all(t in RESTAURANT_TYPES for t in types)
