import secrets
import string
import re

TIME_SLOT_PATTERN = re.compile(r"(\d{2}:\d{2})\s*-\s*(\d{2}:\d{2})")
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

def generate_slug(name: str) -> str:
    # Convert to lowercase
    slug = name.lower()
    # Remove special characters
    slug = re.sub(r'[^a-z0-9\s-]', '', slug)
    # Replace spaces with hyphens
    slug = re.sub(r'\s+', '-', slug)
    slug = slug.strip('-')
    # Random suffix keeps slugs unique across homonymous establishments
    suffix = ''.join(secrets.choice(string.digits) for i in range(4))
    return f"{slug}-{suffix}"

def parse_time_slot(slot: str | None) -> tuple[str, str] | None:
    """Split a legacy "14:30 - 15:00" slot into its start and end times."""
    if not slot:
        return None
    match = TIME_SLOT_PATTERN.search(slot)
    if not match:
        return None
    return match.group(1), match.group(2)

def is_valid_time(value: str) -> bool:
    return bool(TIME_PATTERN.match(value))
