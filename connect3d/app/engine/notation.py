import re
from typing import Tuple

# "x2,y-1,z0"
MOVE_TOKEN = re.compile(r"^x(-?\d+),y(-?\d+),z(-?\d+)$")


def format_move(x: int, y: int, z: int) -> str:
    return f"x{x},y{y},z{z}"


def parse_move(token: str) -> Tuple[int, int, int]:
    """Inverse of format_move. Raises ValueError for anything else."""
    match = MOVE_TOKEN.match(token.strip()) if isinstance(token, str) else None
    if not match:
        raise ValueError(f"Malformed move token: {token!r}")
    x, y, z = (int(v) for v in match.groups())
    return x, y, z
