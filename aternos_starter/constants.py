"""Aternos URLs, CSS selectors, challenge markers and reply texts."""

# ── URLs ─────────────────────────────────────────────────────────────────────

ATERNOS_BASE = "https://aternos.org"
ATERNOS_SERVERS_URL = f"{ATERNOS_BASE}/servers/"

# ── CSS Selectors ────────────────────────────────────────────────────────────

SELECTORS = {
    # Server list page
    "server_list": ".server-body",

    # Server panel
    "start_button": "#start",
}

# ── Challenge Detection ──────────────────────────────────────────────────────

CHALLENGE_SELECTORS = [
    ("#cf-challenge", "cloudflare_challenge"),
    (".cf-challenge", "cloudflare_challenge"),
    ("#cf-turnstile", "cloudflare_turnstile"),
    (".hcaptcha", "hcaptcha"),
    ("iframe[src*='hcaptcha']", "hcaptcha"),
    ("iframe[src*='recaptcha']", "recaptcha"),
]

CLOUDFLARE_INDICATORS = [
    "Just a moment...",
    "Checking your browser",
    "challenge-platform",
]

# ── Browser Identity ─────────────────────────────────────────────────────────

# Camoufox builds a fresh fingerprint per launch; the target OS is rotated too.
FINGERPRINT_OS_CHOICES = ["windows", "macos", "linux"]

# ── Status Protocol ──────────────────────────────────────────────────────────

MALFORMED_STATUS_ERROR = "Server is not responding properly."

# ── Reply Texts ──────────────────────────────────────────────────────────────

MESSAGES = {
    "start_attempt": "Attempting to start the server...",
    "start_success": "Server started successfully!",
    "start_error": "Error starting the server: {error}",
    "start_challenge": "CAPTCHA detected! Unable to start the server.",
    "start_locked": (
        "The /startserver command is currently locked due to a CAPTCHA or "
        "Cloudflare issue. Please wait and try again later."
    ),
    "start_cooldown": (
        "The /startserver command is on cooldown. Please wait {minutes} "
        "minutes before trying again."
    ),
    "start_busy": "A start attempt is already in progress. Please wait for it to finish.",
    "start_available": "The /startserver command is now available again.",
    "unlocked": "The /startserver command has been unlocked.",
    "notify_on": "Server status notifications are now enabled for this chat.",
    "notify_off": "Server status notifications are now disabled for this chat.",
    "address": "The Minecraft server IP is: {host}:{port}",
}

HELP_TEXT = """Here are the available commands:
1. /startserver - Start your Aternos server ({cooldown}-minute cooldown).
2. /status - Check the status of your Minecraft server.
3. /ip - Get the IP address of the Minecraft server.
4. /notify [on|off] - Toggle server status notifications for this chat.
5. /help - Get a list of available commands."""
