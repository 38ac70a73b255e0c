#!/usr/bin/env python

STORE_FRONTS = [
    # (store_front_id, country_code)
    (143505, "ar"),  # Argentina
    (143460, "au"),  # Australia
    (143445, "at"),  # Austria
    (143446, "be"),  # Belgium
    (143503, "br"),  # Brazil
    (143455, "ca"),  # Canada
    (143483, "cl"),  # Chile
    (143465, "cn"),  # China
    (143501, "co"),  # Colombia
    (143495, "cr"),  # Costa Rica
    (143494, "hr"),  # Croatia
    (143489, "cz"),  # Czech Republic
    (143458, "dk"),  # Denmark
    (143508, "do"),  # Dominican Rep.
    (143509, "ec"),  # Ecuador
    (143516, "eg"),  # Egypt
    (143506, "sv"),  # El Salvador
    (143518, "ee"),  # Estonia
    (143447, "fi"),  # Finland
    (143442, "fr"),  # France
    (143443, "de"),  # Germany
    (143448, "gr"),  # Greece
    (143504, "gt"),  # Guatemala
    (143510, "hn"),  # Honduras
    (143463, "hk"),  # Hong Kong
    (143482, "hu"),  # Hungary
    (143467, "in"),  # India
    (143476, "id"),  # Indonesia
    (143449, "ie"),  # Ireland
    (143491, "il"),  # Israel
    (143450, "it"),  # Italy
    (143511, "jm"),  # Jamaica
    (143462, "jp"),  # Japan
    (143517, "kz"),  # Kazakstan
    (143466, "kr"),  # Korea, Republic Of
    (143493, "kw"),  # Kuwait
    (143519, "lv"),  # Latvia
    (143497, "lb"),  # Lebanon
    (143520, "lt"),  # Lithuania
    (143451, "lu"),  # Luxembourg
    (143515, "mo"),  # Macau
    (143473, "my"),  # Malaysia
    (143521, "mt"),  # Malta
    (143468, "mx"),  # Mexico
    (143523, "md"),  # Moldova, Republic Of
    (143452, "nl"),  # Netherlands
    (143461, "nz"),  # New Zealand
    (143512, "ni"),  # Nicaragua
    (143457, "no"),  # Norway
    (143477, "pk"),  # Pakistan
    (143485, "pa"),  # Panama
    (143513, "py"),  # Paraguay
    (143507, "pe"),  # Peru
    (143474, "ph"),  # Philippines
    (143478, "pl"),  # Poland
    (143453, "pt"),  # Portugal
    (143498, "qa"),  # Qatar
    (143487, "ro"),  # Romania
    (143469, "ru"),  # Russia
    (143479, "sa"),  # Saudi Arabia
    (143464, "sg"),  # Singapore
    (143496, "sk"),  # Slovakia
    (143499, "si"),  # Slovenia
    (143472, "za"),  # South Africa
    (143454, "es"),  # Spain
    (143486, "lk"),  # Sri Lanka
    (143456, "se"),  # Sweden
    (143459, "ch"),  # Switzerland
    (143470, "tw"),  # Taiwan
    (143475, "th"),  # Thailand
    (143480, "tr"),  # Turkey
    (143481, "ae"),  # United Arab Emirates
    (143444, "gb"),  # United Kingdom
    (143441, "us"),  # United States
    (143514, "uy"),  # Uruguay
    (143502, "ve"),  # Venezuela
    (143471, "vn"),  # Vietnam
]

GENRES = [
    # (genre_id, genre_name)
    (6000, "business"),
    (6001, "weather"),
    (6002, "utilities"),
    (6003, "travel"),
    (6004, "sports"),
    (6005, "social_networking"),
    (6006, "reference"),
    (6007, "productivity"),
    (6008, "photo_and_video"),
    (6009, "news"),
    (6010, "navigation"),
    (6011, "music"),
    (6012, "lifestyle"),
    (6013, "health_and_fitness"),
    (6014, "games"),
    (6015, "finance"),
    (6016, "entertainment"),
    (6017, "education"),
    (6018, "book"),
    (6020, "medical"),
    (6021, "magazine_and_newspapers"),
    (6022, "catalogs"),
    (6023, "food_and_drink"),
    (6024, "shopping"),
    (6025, "stickers"),
    (6026, "developer_tools"),
    (6027, "graphics_and_design"),
]

PRICINGS = ["paid", "free"]


def get_store_front(country_code):
    """Return the (store_front_id, country_code) pair for a country, or None."""
    for store_front in STORE_FRONTS:
        if store_front[1] == country_code:
            return store_front
    return None


def get_genre(genre_name):
    """Return the (genre_id, genre_name) pair for a genre, or None."""
    for genre in GENRES:
        if genre[1] == genre_name:
            return genre
    return None


def _select(table, wanted, key, label):
    if not wanted:
        return list(table)

    wanted = set(wanted)
    known = {key(item) for item in table}
    unknown = sorted(wanted - known)
    if unknown:
        raise ValueError(f"Unknown {label}: {', '.join(unknown)}")

    # Keep table order so runs are reproducible
    return [item for item in table if key(item) in wanted]


def select_store_fronts(country_codes=None):
    """
    Pick the store fronts to poll.

    Args:
        country_codes: Optional iterable of country codes; None means all

    Returns:
        List of (store_front_id, country_code) pairs in table order
    """
    return _select(STORE_FRONTS, country_codes, lambda sf: sf[1], "country codes")


def select_genres(genre_names=None):
    return _select(GENRES, genre_names, lambda g: g[1], "genres")


def select_pricings(pricings=None):
    return _select(PRICINGS, pricings, lambda p: p, "pricings")
