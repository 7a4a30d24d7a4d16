from __future__ import annotations

import logging

LOGGER = logging.getLogger("bannerpost.app")
AUTH_LOGGER = logging.getLogger("bannerpost.auth")
X_API_LOGGER = logging.getLogger("bannerpost.x_api")

APP_VERSION = "0.1.0"

DEFAULT_SCOPES = ["tweet.read", "tweet.write", "users.read", "offline.access"]
DEFAULT_CALLBACK_URL = "http://127.0.0.1:8000/auth/callback"

# X accepts at most 4 media attachments per post.
MAX_MEDIA_PER_POST = 4
MAX_BANNER_SIDE = 4096
POST_TEXT = "Check out these resized images! \U0001f5bc\ufe0f #ImageResizer"

BANNER_PRESETS = (
    {"label": "Medium Rectangle", "width": 300, "height": 250},
    {"label": "Leaderboard", "width": 728, "height": 90},
    {"label": "Wide Skyscraper", "width": 160, "height": 600},
    {"label": "Half Page", "width": 300, "height": 600},
)
