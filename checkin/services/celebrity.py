"""
Celebrity Feed Service
======================
Keeps the celebrity mood feed available offline.

On construction the last cached feed is loaded, so the list is usable
before the network answers. ``refresh()`` fetches the live feed and
replaces both the in-memory list and the cached copy in one step. When
the fetch fails the previous list stays in place and ``error_message``
is set; the cache is never cleared by a failure.

Raw API rows are turned into display entries here: usernames become
names ("taylor_swift" -> "Taylor Swift"), the emotion id is resolved
through the shared emotion code table, and a handful of well-known
accounts get a profession, category and bio.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from checkin.models.celebrity import Celebrity, CelebrityAPIResponse, CelebrityCategory
from checkin.services.api_client import CheckInAPIClient, CheckInAPIError
from checkin.services.cache import CacheManager
from checkin.services.emotion_codes import NEUTRAL_ID, code_for

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "celebrity_list"
ERROR_MESSAGE = "Failed to load celebrity data"

_CREATED_AT_FORMAT = "%a, %d %b %Y %H:%M:%S GMT"

HEALTH_FACTORS = (
    "Real-time health monitoring through social media activity and public appearances."
)
EMOTIONAL_PROFILE = (
    "Current emotional state based on recent social media analysis and public interactions."
)

_celebrity_list = TypeAdapter(list[Celebrity])


# ---------------------------------------------------------------------------
# Display tables
# ---------------------------------------------------------------------------

# Display labels keyed by emotion code name. Names missing here read "Neutral".
_DISPLAY_NAMES: dict[str, str] = {
    "angry": "Angry",
    "anguished": "Anguished",
    "anxios-with-sweat": "Anxious",
    "astonished": "Astonished",
    "bandage-face": "Hurt",
    "big-frown": "Very Sad",
    "blush": "Blushing",
    "cold-face": "Cold",
    "concerned": "Concerned",
    "cry": "Crying",
    "cursing": "Frustrated",
    "diagonal-mouth": "Uncertain",
    "distraught": "Distraught",
    "dizzy-face": "Dizzy",
    "drool": "Drooling",
    "exhale": "Relieved",
    "expressionless": "Neutral",
    "flushed": "Embarrassed",
    "frown": "Sad",
    "gasp": "Surprised",
    "grimacing": "Awkward",
    "grin-sweat": "Nervous",
    "grin": "Grinning",
    "grinning": "Very Happy",
    "hand-over-mouth": "Shocked",
    "happy-cry": "Overjoyed",
    "head-nod": "Agreeing",
    "head-shake": "Disagreeing",
    "heart-eyes": "In Love",
    "heart-face": "Loving",
    "holding-back-tears": "Emotional",
    "hot-face": "Hot",
    "hug-face": "Affectionate",
    "joy": "Joyful",
    "kissing-closed-eyes": "Kiss",
    "kissing-heart": "Blowing Kiss",
    "kissing-smile": "Happy Kiss",
    "kissing": "Kissing",
    "laughing": "Laughing",
    "loudly-crying": "Sobbing",
    "melting": "Melting",
    "mind-blown": "Mind Blown",
    "monocle": "Curious",
    "mouth-none": "Speechless",
    "mouth-open": "Amazed",
    "neutral-face": "Neutral",
    "partying-face": "Partying",
    "peeking": "Peeking",
    "pensive": "Thoughtful",
    "pleading": "Pleading",
    "rage": "Furious",
    "raised-eyebrow": "Skeptical",
    "relieved": "Relieved",
    "rofl": "Rolling on Floor",
    "rolling-eyes": "Rolling Eyes",
    "sad": "Sad",
    "scared": "Scared",
    "screaming": "Screaming",
    "scrunched-eyes": "Squinting",
    "scrunched-mouth": "Disgusted",
    "shaking-face": "Shaking",
    "shushing-face": "Shushing",
    "sick": "Sick",
    "similing-eyes-with-hand-over-mouth": "Giggling",
    "sleep": "Sleeping",
    "sleepy": "Sleepy",
    "slightly-frowning": "Slightly Sad",
    "slightly-happy": "Content",
    "smile-with-big-eyes": "Beaming",
    "smile": "Smiling",
    "smirk": "Smirking",
    "sneeze": "Sneezing",
    "squinting-tongue": "Winking Tongue",
    "star-struck": "Starstruck",
    "stick-out-tounge": "Playful",
    "surprised": "Surprised",
    "sweat": "Sweating",
    "thermometer-face": "Feverish",
    "thinking-face": "Thinking",
    "tired": "Tired",
    "triumph": "Triumphant",
    "unamused": "Unamused",
    "upside-down-face": "Silly",
    "vomit": "Nauseous",
    "warm-smile": "Warm",
    "weary": "Weary",
    "wink": "Winking",
    "winky-tongue": "Cheeky",
    "woozy": "Woozy",
    "worried": "Worried",
    "x-eyes": "Knocked Out",
    "yawn": "Yawning",
    "yum": "Delicious",
    "zany-face": "Zany",
    "zipper-face": "Silent",
}

# username -> (profession, category)
_KNOWN_ACCOUNTS: dict[str, tuple[str, CelebrityCategory]] = {
    "amy_schumer": ("Comedian & Actress", "Comedy"),
    "barack_obama": ("Former President", "Politics"),
    "jennifer_lawrence": ("Actress", "Acting"),
    "taylor_swift": ("Musician", "Music"),
    "ariana_grande": ("Singer", "Music"),
    "drake": ("Rapper", "Music"),
    "billie_eilish": ("Singer", "Music"),
    "dwayne_johnson": ("Actor", "Acting"),
    "ryan_reynolds": ("Actor", "Acting"),
    "kylie_jenner": ("Entrepreneur", "Social Media"),
    "kim_kardashian": ("Media Personality", "Social Media"),
    "cristiano_ronaldo": ("Footballer", "Sports"),
    "lionel_messi": ("Footballer", "Sports"),
    "lebron_james": ("Basketball Player", "Sports"),
    "elon_musk": ("Entrepreneur", "Business"),
}

_BIOS: dict[str, str] = {
    "amy_schumer": "Stand-up comedian, actress, and writer known for her bold humor and advocacy.",
    "barack_obama": "44th President of the United States, author, and global leader.",
    "jennifer_lawrence": "Academy Award-winning actress known for her versatile roles and down-to-earth personality.",
    "taylor_swift": "Multi-Grammy winning singer-songwriter and global music icon.",
    "ariana_grande": "Pop superstar and actress with a powerful vocal range.",
    "drake": "Canadian rapper, singer, and entrepreneur.",
    "billie_eilish": "Multi-Grammy winning artist known for her unique sound and style.",
}

_DEFAULT_PROFESSION = "Celebrity"
_DEFAULT_CATEGORY: CelebrityCategory = "Social Media"
_DEFAULT_BIO = "Celebrity and public figure."


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_emotion_name(emotion_name: Optional[str]) -> str:
    """Human label for a code name, e.g. 'heart-eyes' -> 'In Love'."""
    if not emotion_name:
        return "Neutral"
    return _DISPLAY_NAMES.get(emotion_name.strip().lower(), "Neutral")


def display_name_for(code_id: Optional[int]) -> str:
    return format_emotion_name(code_for(code_id).name)


def format_username(username: str) -> str:
    return " ".join(part.capitalize() for part in username.replace("_", " ").split())


def parse_created_at(raw: str) -> Optional[datetime]:
    try:
        return datetime.strptime(raw, _CREATED_AT_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def celebrity_from_response(response: CelebrityAPIResponse) -> Celebrity:
    emotion = response.parsed_emotion()
    code_id = code_for(emotion.emotion if emotion else NEUTRAL_ID).id
    key = response.username.lower()
    profession, category = _KNOWN_ACCOUNTS.get(key, (_DEFAULT_PROFESSION, _DEFAULT_CATEGORY))
    points = (emotion.points or []) if emotion else []

    return Celebrity(
        api_id=response.id,
        username=response.username,
        name=format_username(response.username),
        profession=profession,
        category=category,
        bio=_BIOS.get(key, _DEFAULT_BIO),
        emotion_code_id=code_id,
        mood_text=display_name_for(code_id),
        hype=response.hype,
        image_url=response.image,
        created_at=parse_created_at(response.created_at),
        emotion_points=points,
        emotion_references=emotion.references if emotion else [],
        context=(emotion.context or "") if emotion else "",
        health_factors=HEALTH_FACTORS,
        behavior_factors=" ".join(points),
        emotional_profile=EMOTIONAL_PROFILE,
        instagram_handle=response.username,
        twitter_handle=response.username,
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class CelebrityService:
    def __init__(self, api: CheckInAPIClient, cache: CacheManager) -> None:
        self._api = api
        self._cache = cache
        self.is_loading = False
        self.error_message: Optional[str] = None
        self._celebrities: list[Celebrity] = self._cached()

    def celebrities(self) -> list[Celebrity]:
        return list(self._celebrities)

    def get(self, username: str) -> Optional[Celebrity]:
        wanted = username.lower()
        return next((c for c in self._celebrities if c.username.lower() == wanted), None)

    def search(
        self, text: str = "", category: Optional[CelebrityCategory] = None
    ) -> list[Celebrity]:
        """Case-insensitive match on name or profession, optionally within one category."""
        needle = text.strip().lower()
        return [
            c
            for c in self._celebrities
            if (not needle or needle in c.name.lower() or needle in c.profession.lower())
            and (category is None or c.category == category)
        ]

    async def refresh(self) -> list[Celebrity]:
        """Fetch the live feed. On failure the current list is returned unchanged."""
        self.is_loading = not self._celebrities
        self.error_message = None
        try:
            responses = await self._api.fetch_celebrities()
        except CheckInAPIError as exc:
            logger.warning("Celebrity feed unavailable, keeping %d cached: %s", len(self._celebrities), exc)
            self.error_message = ERROR_MESSAGE
            return self.celebrities()
        finally:
            self.is_loading = False

        self._celebrities = [celebrity_from_response(r) for r in responses]
        self._cache.set(
            CACHE_NAMESPACE,
            "",
            [c.model_dump(mode="json", exclude={"emotion_glyph", "last_update"}) for c in self._celebrities],
        )
        logger.info("Fetched %d celebrities", len(self._celebrities))
        return self.celebrities()

    def _cached(self) -> list[Celebrity]:
        payload = self._cache.get(CACHE_NAMESPACE, "", None)
        if payload is None:
            return []
        try:
            celebrities = _celebrity_list.validate_python(payload)
        except ValidationError as exc:
            logger.warning("Discarding unreadable celebrity cache: %s", exc)
            return []
        logger.info("Loaded %d cached celebrities", len(celebrities))
        return celebrities
