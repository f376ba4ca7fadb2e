# connect3d/app/engine/constants.py

# --- Game Rules ---
DEFAULT_WIN_LENGTH = 4
PLAYERS = (1, 2)

# --- Search ---
# Shallow on purpose: the board is unbounded, so branching grows with every move.
DEFAULT_SEARCH_DEPTH = 2

# Terminal scores. Any heuristic value stays well inside this band
# for realistic game lengths.
WIN_SCORE = 10000
LOSS_SCORE = -WIN_SCORE

# --- Geometry ---
# Footprint neighbours in the x-y plane (Manhattan distance 1)
ORTHOGONAL_STEPS = [(1, 0), (-1, 0), (0, 1), (0, -1)]

# The 13 undirected lines through a cell in 3D, used for terminal detection.
WIN_DIRECTIONS = [
    (1, 0, 0),
    (0, 1, 0),
    (0, 0, 1),
    (1, 1, 0),
    (1, -1, 0),
    (1, 0, 1),
    (1, 0, -1),
    (0, 1, 1),
    (0, 1, -1),
    (1, 1, 1),
    (1, 1, -1),
    (1, -1, 1),
    (1, -1, -1),
]

# Heuristic directions grouped by genotype weight.
# The four downward diagonals (dz=-1) are not scored. Tuned genotypes depend
# on this exact set, so it must stay at 9.
EVAL_DIRECTIONS = [
    ((1, 0, 0), "w_plane"),
    ((0, 1, 0), "w_plane"),
    ((1, 1, 0), "w_plane"),
    ((1, -1, 0), "w_plane"),
    ((0, 0, 1), "w_vertical"),
    ((1, 0, 1), "w_3d_a"),
    ((0, 1, 1), "w_3d_a"),
    ((1, 1, 1), "w_3d_b"),
    ((1, -1, 1), "w_3d_b"),
]

WEIGHT_KEYS = ("w_plane", "w_vertical", "w_3d_a", "w_3d_b")

# --- Self-play pacing (seconds) ---
MIN_DELAY = 0.01
FALLBACK_DELAY = 1.0  # used when a delay below MIN_DELAY is requested
MAX_DELAY = 60.0
