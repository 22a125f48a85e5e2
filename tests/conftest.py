from __future__ import annotations

import os

os.environ.setdefault("BLOGMEDIA_JWT_SIGNING_KEY", "test-signing-key")
os.environ.setdefault("BLOGMEDIA_SESSION_SECRET", "test-session-secret")
