"""Configuration settings for the media server."""

import os
from common.constants import DEFAULT_HOST, DEFAULT_PORT


HOST = os.environ.get("HOST", DEFAULT_HOST)

PORT = int(os.environ.get("PORT", str(DEFAULT_PORT)))

MEDIA_DIR = os.environ.get("MEDIA_DIR", os.path.join(os.getcwd(), "media"))

PRINTS_DIR = os.environ.get("PRINTS_DIR", os.path.join(os.getcwd(), "prints"))

ORPHAN_SCAN_INTERVAL_SECONDS = int(os.environ.get("ORPHAN_SCAN_INTERVAL_SECONDS", "0"))

ORPHAN_GRACE_SECONDS = int(os.environ.get("ORPHAN_GRACE_SECONDS", "3600"))

ORPHAN_CLEANUP_DELETE = os.environ.get("ORPHAN_CLEANUP_DELETE", "false").lower() in ("1", "true", "yes")

RELOAD = os.environ.get("RELOAD", "false").lower() in ("1", "true", "yes")
