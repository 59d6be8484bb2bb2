# cardapp/profiles/mock.py
import random
from urllib.parse import quote

from cardapp.registry.schemas import ProfileSnapshot

MOCK_BIO = "크리에이터이자 개발자입니다. Web3와 AI에 관심이 많습니다. 🚀 #BuildInPublic"

MOCK_LOCATIONS = [
    "Seoul, Korea",
    "San Francisco, CA",
    "Tokyo, Japan",
    "London, UK",
]


def mock_profile(username: str, rng: random.Random | None = None) -> ProfileSnapshot:
    """
    Perfil de prueba para cuando no hay API/OAuth.
    El avatar (dicebear) es estable por username; el resto es aleatorio.
    """
    rng = rng or random.Random()
    return ProfileSnapshot(
        username=username,
        display_name=f"{username[:1].upper()}{username[1:]} User",
        profile_image=f"https://api.dicebear.com/7.x/avataaars/svg?seed={quote(username, safe='')}",
        bio=MOCK_BIO,
        followers=rng.randint(100, 10099),
        following=rng.randint(50, 1049),
        verified=rng.random() > 0.8,
        location=rng.choice(MOCK_LOCATIONS),
    )
