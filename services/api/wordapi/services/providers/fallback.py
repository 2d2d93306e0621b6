"""Local category generator used when no provider is configured or all fail.

Builds categories from fixed themed word pools, so it needs no network and
cannot fail. Names are "<Adjective> <Theme> <number>", sometimes with an extra
letter suffix, to keep collisions with stored names rare.
"""

from __future__ import annotations

import logging
import random
import string

from wordapi.models.category import MAX_WORDS, SOURCE_FALLBACK, CategoryDraft

logger = logging.getLogger("uvicorn.error")

MIN_FALLBACK_WORDS = 5
EXTRA_SUFFIX_PROBABILITY = 0.3

ADJECTIVES: list[str] = [
    "Amazing", "Bold", "Bright", "Classic", "Cozy", "Curious", "Daring", "Epic",
    "Fancy", "Fresh", "Giant", "Golden", "Hidden", "Lucky", "Magic", "Mighty",
    "Mystic", "Quick", "Quiet", "Rapid", "Secret", "Silly", "Sunny", "Tiny",
    "Vivid", "Wild", "Wonderful", "Zesty",
]

WORD_POOLS: dict[str, list[str]] = {
    "Animals": [
        "lion", "tiger", "zebra", "giraffe", "elephant", "kangaroo", "penguin", "dolphin",
        "otter", "badger", "falcon", "parrot", "koala", "panda", "wolf", "fox",
        "moose", "camel", "lemur", "hedgehog", "walrus", "beaver", "cheetah", "gorilla",
    ],
    "Fruits": [
        "apple", "banana", "cherry", "grape", "lemon", "mango", "orange", "peach",
        "pear", "plum", "kiwi", "papaya", "apricot", "coconut", "fig", "lime",
        "melon", "guava", "lychee", "raspberry", "blueberry", "strawberry", "pineapple", "pomegranate",
    ],
    "Colors": [
        "red", "blue", "green", "yellow", "purple", "orange", "pink", "brown",
        "black", "white", "gray", "teal", "navy", "maroon", "olive", "cyan",
        "magenta", "turquoise", "lavender", "beige", "crimson", "amber", "indigo", "violet",
    ],
    "Sports": [
        "soccer", "tennis", "golf", "rugby", "cricket", "hockey", "baseball", "basketball",
        "volleyball", "boxing", "fencing", "rowing", "surfing", "skiing", "cycling", "archery",
        "badminton", "climbing", "diving", "judo", "karate", "sailing", "skating", "wrestling",
    ],
    "Kitchen": [
        "spoon", "fork", "knife", "plate", "bowl", "kettle", "pan", "pot",
        "whisk", "ladle", "grater", "blender", "toaster", "oven", "spatula", "colander",
        "teapot", "mug", "cup", "tray", "sieve", "napkin", "apron", "rolling pin",
    ],
    "Weather": [
        "rain", "snow", "hail", "sleet", "fog", "mist", "storm", "thunder",
        "lightning", "breeze", "gale", "drizzle", "frost", "heatwave", "cloud", "rainbow",
        "tornado", "hurricane", "monsoon", "blizzard", "sunshine", "humidity", "drought", "dew",
    ],
    "Instruments": [
        "piano", "guitar", "violin", "cello", "flute", "clarinet", "trumpet", "trombone",
        "saxophone", "harp", "drums", "banjo", "ukulele", "accordion", "harmonica", "oboe",
        "tuba", "xylophone", "mandolin", "bagpipes", "tambourine", "triangle", "bassoon", "organ",
    ],
    "Space": [
        "planet", "comet", "asteroid", "galaxy", "nebula", "meteor", "orbit", "rocket",
        "satellite", "moon", "star", "telescope", "astronaut", "eclipse", "gravity", "quasar",
        "pulsar", "supernova", "cosmos", "crater", "mercury", "venus", "mars", "jupiter",
    ],
    "Professions": [
        "doctor", "nurse", "teacher", "pilot", "chef", "farmer", "lawyer", "artist",
        "plumber", "engineer", "dentist", "baker", "carpenter", "firefighter", "librarian", "mechanic",
        "architect", "journalist", "scientist", "tailor", "gardener", "barber", "painter", "sailor",
    ],
    "Vehicles": [
        "car", "bus", "train", "tram", "truck", "bicycle", "scooter", "motorcycle",
        "airplane", "helicopter", "boat", "ferry", "yacht", "submarine", "taxi", "van",
        "tractor", "canoe", "kayak", "glider", "skateboard", "wagon", "ambulance", "rickshaw",
    ],
}


class FallbackGenerator:
    """Infallible, provider-free category generator."""

    name = SOURCE_FALLBACK

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()

    def generate(self, n: int) -> list[CategoryDraft]:
        if n <= 0:
            return []

        drafts: list[CategoryDraft] = []
        seen: set[str] = set()
        for _ in range(n):
            theme = self._rng.choice(list(WORD_POOLS))
            name = self._make_name(theme)
            # Retry a couple of times on an in-batch clash, then accept it;
            # the store skips duplicates anyway.
            for _attempt in range(3):
                if name not in seen:
                    break
                name = self._make_name(theme)
            seen.add(name)

            pool = WORD_POOLS[theme]
            count = self._rng.randint(MIN_FALLBACK_WORDS, min(MAX_WORDS, len(pool)))
            words = list(dict.fromkeys(self._rng.sample(pool, count)))
            drafts.append(CategoryDraft(category_name=name, words=words, source_tag=SOURCE_FALLBACK))

        logger.info(f"[fallback] generated {len(drafts)} categories")
        return drafts

    def _make_name(self, theme: str) -> str:
        name = f"{self._rng.choice(ADJECTIVES)} {theme} {self._rng.randint(100, 9999)}"
        if self._rng.random() < EXTRA_SUFFIX_PROBABILITY:
            name += f"-{self._rng.choice(string.ascii_uppercase)}"
        return name
