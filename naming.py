import random
from typing import Optional

from user_agents import parse as parse_user_agent

from schemas.messages import PeerName

COLORS = [
    "Amber", "Aqua", "Azure", "Beige", "Black", "Blue", "Bronze", "Brown",
    "Coral", "Crimson", "Cyan", "Gold", "Gray", "Green", "Indigo", "Ivory",
    "Jade", "Lavender", "Lime", "Magenta", "Maroon", "Navy", "Olive", "Orange",
    "Peach", "Pink", "Plum", "Purple", "Red", "Ruby", "Salmon", "Scarlet",
    "Silver", "Tan", "Teal", "Turquoise", "Violet", "White", "Yellow",
]

ANIMALS = [
    "Albatross", "Alligator", "Antelope", "Badger", "Beaver", "Bison", "Camel",
    "Cheetah", "Cobra", "Crane", "Dingo", "Dolphin", "Eagle", "Falcon",
    "Ferret", "Gazelle", "Gecko", "Gorilla", "Hamster", "Heron", "Ibex",
    "Jackal", "Jaguar", "Koala", "Lemur", "Leopard", "Llama", "Lynx",
    "Marmot", "Meerkat", "Moose", "Narwhal", "Ocelot", "Otter", "Panda",
    "Parrot", "Pelican", "Penguin", "Puffin", "Quokka", "Raccoon", "Salamander",
    "Seal", "Sloth", "Swan", "Tapir", "Tiger", "Toucan", "Walrus", "Wombat",
    "Yak", "Zebra",
]


def _known(family: Optional[str]) -> Optional[str]:
    if not family or family == "Other":
        return None
    return family


def _device_type(ua) -> Optional[str]:
    if ua.is_tablet:
        return "tablet"
    if ua.is_mobile:
        return "mobile"
    return None


def java_string_hash(value: str) -> int:
    """32-bit signed hash, ``s[0]*31^(n-1) + ... + s[n-1]``."""
    h = 0
    for ch in value:
        h = (31 * h + ord(ch)) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def display_name_for(peer_id: str) -> str:
    rng = random.Random(java_string_hash(peer_id))
    return f"{rng.choice(COLORS)} {rng.choice(ANIMALS)}"


def derive_name(peer_id: str, user_agent: Optional[str]) -> PeerName:
    """Presentation descriptor for a peer: device summary plus a stable display name."""
    ua = parse_user_agent(user_agent or "")
    os_name = _known(ua.os.family)
    browser = _known(ua.browser.family)
    model = _known(ua.device.model)

    device_name = ""
    if os_name:
        device_name = os_name.replace("Mac OS X", "Mac").replace("Mac OS", "Mac") + " "
    if model:
        device_name += model
    elif browser:
        device_name += browser
    device_name = device_name.strip() or "Unknown Device"

    return PeerName(
        model=model,
        os=os_name,
        browser=browser,
        type=_device_type(ua),
        deviceName=device_name,
        displayName=display_name_for(peer_id),
    )
