# Role: Static geographic reference data + the deterministic heuristics used when the AI geography check
# is unavailable. Representative lists only; anything missing is decided by the AI classifier.

from __future__ import annotations

import re
from typing import Dict, Tuple

GeoKind = str  # "city" | "state" | "country"

COUNTRIES: Tuple[str, ...] = (
    "Afghanistan", "Albania", "Algeria", "Andorra", "Angola", "Argentina", "Armenia", "Australia", "Austria",
    "Azerbaijan", "Bahrain", "Bangladesh", "Belarus", "Belgium", "Bhutan", "Bolivia", "Bosnia and Herzegovina",
    "Brazil", "Bulgaria", "Cambodia", "Cameroon", "Canada", "Chile", "China", "Colombia", "Croatia", "Cuba",
    "Cyprus", "Czech Republic", "Denmark", "Ecuador", "Egypt", "Estonia", "Ethiopia", "Finland", "France",
    "Georgia", "Germany", "Ghana", "Greece", "Hungary", "Iceland", "India", "Indonesia", "Iran", "Iraq",
    "Ireland", "Israel", "Italy", "Japan", "Jordan", "Kazakhstan", "Kenya", "Kuwait", "Latvia", "Lebanon",
    "Lithuania", "Malaysia", "Mexico", "Morocco", "Nepal", "Netherlands", "New Zealand", "Nigeria", "Norway",
    "Pakistan", "Philippines", "Poland", "Portugal", "Qatar", "Romania", "Russia", "Saudi Arabia", "Singapore",
    "South Africa", "South Korea", "Spain", "Sri Lanka", "Sweden", "Switzerland", "Thailand", "Turkey",
    "Ukraine", "United Arab Emirates", "United Kingdom", "United States", "Vietnam", "Zimbabwe",
)

STATES: Tuple[str, ...] = (
    # India
    "Andhra Pradesh", "Arunachal Pradesh", "Assam", "Bihar", "Chhattisgarh", "Goa", "Gujarat", "Haryana",
    "Himachal Pradesh", "Jharkhand", "Karnataka", "Kerala", "Madhya Pradesh", "Maharashtra", "Manipur",
    "Meghalaya", "Mizoram", "Nagaland", "Odisha", "Punjab", "Rajasthan", "Sikkim", "Tamil Nadu",
    "Telangana", "Tripura", "Uttar Pradesh", "Uttarakhand", "West Bengal",
    # USA
    "Alabama", "Alaska", "Arizona", "Arkansas", "California", "Colorado", "Connecticut", "Delaware", "Florida",
    "Hawaii", "Idaho", "Illinois", "Indiana", "Iowa", "Kansas", "Kentucky", "Louisiana", "Maine", "Maryland",
    "Massachusetts", "Michigan", "Minnesota", "Mississippi", "Missouri", "Montana", "Nebraska", "Nevada",
    "New Hampshire", "New Jersey", "New Mexico", "New York", "North Carolina", "North Dakota", "Ohio",
    "Oklahoma", "Oregon", "Pennsylvania", "Rhode Island", "South Carolina", "South Dakota", "Tennessee",
    "Texas", "Utah", "Vermont", "Virginia", "Washington", "West Virginia", "Wisconsin", "Wyoming",
    # Canada
    "Alberta", "British Columbia", "Manitoba", "New Brunswick", "Newfoundland and Labrador",
    "Northwest Territories", "Nova Scotia", "Nunavut", "Ontario", "Prince Edward Island", "Quebec",
    "Saskatchewan", "Yukon",
    # Australia
    "New South Wales", "Victoria", "Queensland", "Western Australia", "South Australia", "Tasmania",
    "Australian Capital Territory", "Northern Territory",
    # Other
    "England", "Scotland", "Wales", "Northern Ireland", "Bavaria", "North Rhine-Westphalia",
)

CITIES: Tuple[str, ...] = (
    # India
    "Mumbai", "Delhi", "Bangalore", "Bengaluru", "Hyderabad", "Chennai", "Kolkata", "Pune", "Ahmedabad",
    "Surat", "Jaipur", "Lucknow", "Kanpur", "Nagpur", "Indore", "Thane", "Bhopal", "Visakhapatnam", "Patna",
    "Vadodara", "Ghaziabad", "Ludhiana", "Agra", "Nashik", "Faridabad", "Meerut", "Rajkot", "Varanasi",
    "Srinagar", "Dhanbad", "Jodhpur", "Amritsar", "Raipur", "Allahabad", "Coimbatore", "Kochi", "Mysore",
    # USA
    "New York", "Los Angeles", "Chicago", "Houston", "Phoenix", "Philadelphia", "San Antonio", "San Diego",
    "Dallas", "San Jose", "Austin", "San Francisco", "Seattle", "Denver", "Washington", "Boston",
    "Nashville", "Detroit", "Portland", "Las Vegas", "Baltimore", "Sacramento",
    # International
    "London", "Paris", "Tokyo", "Sydney", "Toronto", "Singapore", "Dubai", "Hong Kong", "Berlin", "Madrid",
    "Rome", "Amsterdam", "Stockholm", "Copenhagen", "Oslo", "Helsinki", "Zurich", "Geneva", "Vienna",
    "Brussels", "Dublin", "Edinburgh", "Barcelona", "Milan", "Munich", "Frankfurt", "Hamburg", "Vancouver",
    "Montreal", "Calgary", "Ottawa", "Melbourne", "Brisbane", "Perth", "Adelaide", "Auckland", "Wellington",
    "Seoul", "Bangkok", "Manila", "Jakarta", "Kuala Lumpur", "Hanoi", "Taipei", "Shanghai", "Beijing",
    "Kathmandu", "Dhaka", "Colombo", "Nairobi", "Cairo",
)

_BY_KIND: Dict[str, Tuple[str, ...]] = {
    "country": COUNTRIES,
    "state": STATES,
    "city": CITIES,
}

EXAMPLES: Dict[str, str] = {
    "city": "• Mumbai, Delhi, New York\n• London, Tokyo, Sydney\n• Paris, Toronto, Singapore",
    "state": "• Maharashtra, California, Ontario\n• New York, Queensland, Bavaria\n• Texas, Victoria, Quebec",
    "country": "• India, United States, Canada\n• United Kingdom, Australia, Germany\n• France, Japan, Brazil",
}

# Leading ISO calling codes accepted on numbers longer than 10 digits.
CALLING_CODES = frozenset(
    {
        "1", "7", "20", "27", "30", "31", "32", "33", "34", "36", "39", "40", "41", "43", "44", "45", "46",
        "47", "48", "49", "51", "52", "53", "54", "55", "56", "57", "58", "60", "61", "62", "63", "64", "65",
        "66", "81", "82", "84", "86", "90", "91", "92", "93", "94", "95", "98",
        "212", "213", "216", "218", "220", "221", "222", "223", "224", "225", "226", "227", "228", "229",
        "230", "231", "232", "233", "234", "235", "236", "237", "238", "239", "240", "241", "242", "243",
        "244", "245", "246", "247", "248", "249", "250", "251", "252", "253", "254", "255", "256", "257",
        "258", "260", "261", "262", "263", "264", "265", "266", "267", "268", "269", "290", "291", "297",
        "298", "299", "350", "351", "352", "353", "354", "355", "356", "357", "358", "359", "370", "371",
        "372", "373", "374", "375", "376", "377", "378", "380", "381", "382", "383", "385", "386", "387",
        "389", "420", "421", "423", "500", "501", "502", "503", "504", "505", "506", "507", "508", "509",
        "590", "591", "592", "593", "594", "595", "596", "597", "598", "599", "670", "672", "673", "674",
        "675", "676", "677", "678", "679", "680", "681", "682", "683", "684", "685", "686", "687", "688",
        "689", "690", "691", "692", "850", "852", "853", "855", "856", "880", "886", "960", "961", "962",
        "963", "964", "965", "966", "967", "968", "970", "971", "972", "973", "974", "975", "976", "977",
        "992", "993", "994", "995", "996", "998",
    }
)

COMMON_FIRST_NAMES = frozenset(
    {
        "john", "jane", "michael", "sarah", "david", "lisa", "robert", "mary", "james", "patricia",
        "william", "jennifer", "richard", "elizabeth", "raj", "priya", "amit", "neha", "rohit", "kavya",
        "arun", "meera", "rahul", "anjali", "vikram", "pooja", "suresh", "deepika", "ravi", "anita",
    }
)

_PERSON_NAME_PATTERNS = (
    re.compile(r"^[A-Z][a-z]+ [A-Z][a-z]+$"),  # First Last
    re.compile(r"^[A-Z][a-z]+ [A-Z]\.$"),  # First L.
    re.compile(r"^(Mr|Ms|Mrs|Dr)\.?\s"),
)

_PLACEHOLDER_PATTERNS = (
    re.compile(r"^(test|example|sample|dummy)$", re.IGNORECASE),
    re.compile(r"^[0-9]+$"),
    re.compile(r"^[^a-zA-Z]*$"),
    re.compile(r"^.$"),
    re.compile(r"^(na|n/a|nil|none|null)$", re.IGNORECASE),
    re.compile(r"^(abc|xyz|def)$", re.IGNORECASE),
    re.compile(r"^(asdf|qwerty|1234)$", re.IGNORECASE),
)


def entries_for(kind: GeoKind) -> Tuple[str, ...]:
    return _BY_KIND.get(kind, CITIES)


def examples_for(kind: GeoKind) -> str:
    return EXAMPLES.get(kind, "Please use a real geographic name")


def is_known_place(text: str, kind: GeoKind) -> bool:
    # Exact or substring match in either direction, case-insensitive.
    needle = text.strip().lower()
    if not needle:
        return False
    for entry in entries_for(kind):
        e = entry.lower()
        if e == needle or needle in e or e in needle:
            return True
    return False


def is_probably_person_name(text: str) -> bool:
    if any(p.search(text) for p in _PERSON_NAME_PATTERNS):
        return True
    words = text.lower().split()
    return any(w in COMMON_FIRST_NAMES for w in words)


def is_probably_invalid(text: str) -> bool:
    t = text.strip()
    return any(p.search(t) for p in _PLACEHOLDER_PATTERNS)


def heuristic_accepts(text: str) -> bool:
    return not (is_probably_person_name(text) or is_probably_invalid(text))
