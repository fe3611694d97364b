"""
agent.capabilities.resources - Static content shared by several agents.

These tables are the deterministic fallbacks used whenever the content
provider is unavailable, plus the crisis/therapy directory every
mental-health path links to.
"""

from __future__ import annotations

from typing import Any

CRISIS_LINES = [
    {"name": "Crisis Text Line", "contact": "Text HOME to 741741", "description": "24/7 crisis support"},
    {"name": "988 Suicide & Crisis Lifeline", "contact": "988", "description": "24/7 suicide prevention"},
]

THERAPY_RESOURCES: dict[str, list[dict[str, str]]] = {
    "crisis": CRISIS_LINES,
    "therapy": [
        {"name": "BetterHelp", "url": "https://www.betterhelp.com", "description": "Online therapy sessions"},
        {"name": "Psychology Today", "url": "https://www.psychologytoday.com", "description": "Find local therapists"},
        {"name": "Talkspace", "url": "https://www.talkspace.com", "description": "Text-based therapy"},
    ],
    "apps": [
        {"name": "Headspace", "description": "Guided meditation and mindfulness"},
        {"name": "Calm", "description": "Sleep stories and meditation"},
        {"name": "Insight Timer", "description": "Free meditation library"},
    ],
}

AFFIRMATIONS = {
    "stressed": "I am capable of handling whatever comes my way. This feeling will pass, and I am stronger than I know.",
    "happy": "I deserve this happiness. I choose to embrace joy and share my positive energy with others.",
    "sad": "My feelings are valid and temporary. I am worthy of love, comfort, and healing.",
    "anxious": "I am safe in this moment. I breathe deeply and trust in my ability to navigate uncertainty.",
    "focused": "I am present and capable. My mind is clear, and I can accomplish what I set out to do.",
    "tired": "I honor my body's need for rest. I am allowed to take breaks and recharge.",
}
DEFAULT_AFFIRMATION = "I am exactly where I need to be in my journey."

JOURNAL_PROMPTS = {
    "stressed": [
        "What's one small thing I can control right now that might help me feel more grounded?",
        "How can I show myself compassion during this challenging time?",
        "What would I tell a friend who was feeling the way I feel right now?",
    ],
    "happy": [
        "What brought me joy today, and how can I create more moments like this?",
        "How has my positive mood affected the people around me?",
        "What am I most grateful for in this moment?",
    ],
    "sad": [
        "What do I need most right now to feel supported?",
        "How have I overcome difficult feelings in the past?",
        "What small act of self-care would feel good today?",
    ],
}

MUSIC_FALLBACK = {
    "happy": [
        {"name": "Happy Hits", "description": "Feel-good tracks to amplify your positive mood",
         "url": "https://open.spotify.com/playlist/37i9dQZF1DX0XUsuxWHRQd", "tracks": 50},
        {"name": "Good Vibes", "description": "Upbeat songs for good times",
         "url": "https://open.spotify.com/playlist/37i9dQZF1DX9XIFQuFvzM4", "tracks": 75},
    ],
    "stressed": [
        {"name": "Peaceful Piano", "description": "Calming piano melodies for stress relief",
         "url": "https://open.spotify.com/playlist/37i9dQZF1DX4sWSpwq3LiO", "tracks": 100},
        {"name": "Deep Focus", "description": "Ambient sounds for relaxation",
         "url": "https://open.spotify.com/playlist/37i9dQZF1DWZeKCadgRdKQ", "tracks": 60},
    ],
    "focused": [
        {"name": "Deep Focus", "description": "Instrumental music for concentration",
         "url": "https://open.spotify.com/playlist/37i9dQZF1DWZeKCadgRdKQ", "tracks": 180},
        {"name": "Lo-Fi Beats", "description": "Chill beats for productivity",
         "url": "https://open.spotify.com/playlist/37i9dQZF1DWWQRwui0ExPn", "tracks": 120},
    ],
}


def affirmation_for(mood: str) -> str:
    return AFFIRMATIONS.get(mood, DEFAULT_AFFIRMATION)


def journal_prompts_for(mood: str) -> list[str]:
    return list(JOURNAL_PROMPTS.get(mood, JOURNAL_PROMPTS["stressed"]))


def playlists_for(mood: str) -> dict[str, Any]:
    return {"playlists": [dict(p) for p in MUSIC_FALLBACK.get(mood, MUSIC_FALLBACK["focused"])]}


def therapy_resources() -> dict[str, list[dict[str, str]]]:
    return {key: [dict(item) for item in items] for key, items in THERAPY_RESOURCES.items()}
