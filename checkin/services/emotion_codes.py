"""
Emotion Code Table
==================
Static mapping between the integer emotion ids the backend predicts
(1–95) and the symbolic names / display glyphs the app renders.

The backend and every client must ship the same table. Lookups are
total: a missing, out-of-range or ``None`` id resolves to the neutral
entry (46, "neutral-face"), and an unknown name resolves to id 46.

Name → id lookups are case-insensitive. Older screens in the app used
a second hand-maintained name table with different spellings; those
spellings are accepted through ``_NAME_ALIASES`` so ids round-trip no
matter which one a caller was built against.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

NEUTRAL_ID = 46


@dataclass(frozen=True)
class EmotionCode:
    id: int
    name: str
    glyph: str


# ---------------------------------------------------------------------------
# Canonical table: (id, name, glyph)
# ---------------------------------------------------------------------------

_TABLE: tuple[tuple[int, str, str], ...] = (
    (1, "angry", "😠"),
    (2, "anguished", "😧"),
    (3, "anxios-with-sweat", "😰"),
    (4, "astonished", "😲"),
    (5, "bandage-face", "🤕"),
    (6, "big-frown", "☹️"),
    (7, "blush", "😊"),
    (8, "cold-face", "🥶"),
    (9, "concerned", "😟"),
    (10, "cry", "😢"),
    (11, "cursing", "🤬"),
    (12, "diagonal-mouth", "😕"),
    (13, "distraught", "😩"),
    (14, "dizzy-face", "😵"),
    (15, "drool", "🤤"),
    (16, "exhale", "😮‍💨"),
    (17, "expressionless", "😑"),
    (18, "flushed", "😳"),
    (19, "frown", "🙁"),
    (20, "gasp", "😱"),
    (21, "grimacing", "😬"),
    (22, "grin-sweat", "😅"),
    (23, "grin", "😁"),
    (24, "grinning", "😀"),
    (25, "hand-over-mouth", "🤭"),
    (26, "happy-cry", "😂"),
    (27, "head-nod", "🙂"),
    (28, "head-shake", "🙃"),
    (29, "heart-eyes", "😍"),
    (30, "heart-face", "🥰"),
    (31, "holding-back-tears", "🥺"),
    (32, "hot-face", "🥵"),
    (33, "hug-face", "🤗"),
    (34, "joy", "😄"),
    (35, "kissing-closed-eyes", "😚"),
    (36, "kissing-heart", "😘"),
    (37, "kissing-smile", "☺️"),
    (38, "kissing", "😗"),
    (39, "laughing", "😆"),
    (40, "loudly-crying", "😭"),
    (41, "melting", "🫠"),
    (42, "mind-blown", "🤯"),
    (43, "monocle", "🧐"),
    (44, "mouth-none", "😶"),
    (45, "mouth-open", "😮"),
    (46, "neutral-face", "😐"),
    (47, "partying-face", "🥳"),
    (48, "peeking", "🫣"),
    (49, "pensive", "😔"),
    (50, "pleading", "🥺"),
    (51, "rage", "😡"),
    (52, "raised-eyebrow", "🤨"),
    (53, "relieved", "😌"),
    (54, "rofl", "🤣"),
    (55, "rolling-eyes", "🙄"),
    (56, "sad", "😞"),
    (57, "scared", "😨"),
    (58, "screaming", "😱"),
    (59, "scrunched-eyes", "😣"),
    (60, "scrunched-mouth", "😖"),
    (61, "shaking-face", "🫨"),
    (62, "shushing-face", "🤫"),
    (63, "sick", "🤢"),
    (64, "similing-eyes-with-hand-over-mouth", "😄"),
    (65, "sleep", "😴"),
    (66, "sleepy", "😪"),
    (67, "slightly-frowning", "🙁"),
    (68, "slightly-happy", "🙂"),
    (69, "smile-with-big-eyes", "😃"),
    (70, "smile", "😊"),
    (71, "smirk", "😏"),
    (72, "sneeze", "🤧"),
    (73, "squinting-tongue", "😝"),
    (74, "star-struck", "🤩"),
    (75, "stick-out-tounge", "😛"),
    (76, "surprised", "😯"),
    (77, "sweat", "😓"),
    (78, "thermometer-face", "🤒"),
    (79, "thinking-face", "🤔"),
    (80, "tired", "😫"),
    (81, "triumph", "😤"),
    (82, "unamused", "😒"),
    (83, "upside-down-face", "🙃"),
    (84, "vomit", "🤮"),
    (85, "warm-smile", "😊"),
    (86, "weary", "😩"),
    (87, "wink", "😉"),
    (88, "winky-tongue", "😜"),
    (89, "woozy", "🥴"),
    (90, "worried", "😰"),
    (91, "x-eyes", "😵"),
    (92, "yawn", "🥱"),
    (93, "yum", "😋"),
    (94, "zany-face", "🤪"),
    (95, "zipper-face", "🤐"),
)

EMOTION_CODES: dict[int, EmotionCode] = {
    code_id: EmotionCode(code_id, name, glyph) for code_id, name, glyph in _TABLE
}

NEUTRAL = EMOTION_CODES[NEUTRAL_ID]

# Spellings found in other parts of the app, lower-cased.
_NAME_ALIASES: dict[str, int] = {
    "neutral": 46,
    "squinting-tounge": 73,
    "stick-out-tongue": 75,
    "winky-toungue": 88,
    "mind--blown": 42,
    "cold-fcae": 8,
    "upside-down": 83,
    "zany": 94,
    "zipper": 95,
    "thinking": 79,
    "shushing": 62,
    "dizzy": 14,
    "thermometer": 78,
    "bandage": 5,
    "hot": 32,
    "cold": 8,
    "shaking": 61,
    "anxious": 3,
}

_ID_BY_NAME: dict[str, int] = {
    **_NAME_ALIASES,
    **{code.name.lower(): code.id for code in EMOTION_CODES.values()},
}


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def code_for(code_id: Optional[int]) -> EmotionCode:
    """Return the table entry for *code_id*, or the neutral entry."""
    if code_id is None:
        return NEUTRAL
    return EMOTION_CODES.get(code_id, NEUTRAL)


def glyph_for(code_id: Optional[int]) -> str:
    return code_for(code_id).glyph


def name_for(code_id: Optional[int]) -> str:
    return code_for(code_id).name


def id_for(name: Optional[str]) -> int:
    """Case-insensitive reverse lookup. Unknown or empty names map to 46."""
    if not name:
        return NEUTRAL_ID
    return _ID_BY_NAME.get(name.strip().lower(), NEUTRAL_ID)


# ---------------------------------------------------------------------------
# Free-text helpers
# ---------------------------------------------------------------------------

# Checked in order; first label with a matching keyword wins.
_EMOTION_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Joyful", ("joy", "happy", "joyful")),
    ("Excited", ("excited", "energetic")),
    ("Calm", ("calm", "peaceful", "relaxed")),
    ("Focused", ("focused", "engaged")),
    ("Stressed", ("stressed", "anxious")),
    ("Sad", ("sad", "down")),
    ("Confident", ("confident", "determined")),
    ("Tired", ("tired", "exhausted")),
)


def extract_emotion_text(profile: Optional[str]) -> str:
    """Reduce an AI emotion profile paragraph to a one-word label."""
    if not profile:
        return "Neutral"
    lowered = profile.lower()
    for label, keywords in _EMOTION_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return label
    return "Neutral"


_NON_DIGITS = re.compile(r"\D")


def clean_phone_number(phone_number: str) -> str:
    """Strip everything but digits, e.g. '+1 (555) 123-4567' -> '15551234567'."""
    return _NON_DIGITS.sub("", phone_number or "")
