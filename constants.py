# constants.py
"""
Application-level constants.

These values are fixed for the lifetime of the effect and are deliberately
not part of `config.json`. They define the attractor, the swarm, the margin
geometry and the rendering look. `config.json` only carries ambient settings
such as logging and the window.
"""

# --- Lorenz Attractor ---
LORENZ_SIGMA = 10.0
LORENZ_RHO = 28.0
LORENZ_BETA = 8.0 / 3.0
LORENZ_DT = 0.003

# Bounds outside which a particle is respawned near the origin.
LORENZ_BOUND_XY = 50.0
LORENZ_Z_MIN = 0.0
LORENZ_Z_MAX = 80.0

# Respawn region (x, y in [-10, 10], z in [15, 35]).
RESPAWN_XY_HALF_RANGE = 10.0
RESPAWN_Z_MIN = 15.0
RESPAWN_Z_MAX = 35.0

# --- Swarm ---
PARTICLE_COUNT = 80
PARTICLE_MIN_SIZE = 1.0
PARTICLE_MAX_SIZE = 3.5
PARTICLE_MIN_BRIGHTNESS = 0.4
# Probability that a particle belongs to the primary (grey) colour class.
PRIMARY_COLOR_PROBABILITY = 0.9

# --- Noise Spreading ---
# Simulation time added per rendered frame.
NOISE_SPEED = 0.0006
NOISE_SCALE = 0.5
LORENZ_INFLUENCE = 0.3
NOISE_WEIGHT_X = 0.15
NOISE_WEIGHT_Y = 0.2

# --- Margin Geometry (fractions of the surface width) ---
MARGIN_PERCENT = 0.32
FADE_ZONE_PERCENT = 0.10
# Extra horizontal reach of a band beyond its margin width.
BAND_OVERSCAN_PERCENT = 0.08
# Pixels a particle may stray outside the visible surface.
SCREEN_OVERSCAN = 20.0
VERTICAL_PADDING_PERCENT = 0.02

# --- Connections ---
CONNECTION_DISTANCE = 70.0
CONNECTION_DISTANCE_SQ = CONNECTION_DISTANCE * CONNECTION_DISTANCE
CONNECTION_ALPHA = 0.25
CONNECTION_COLOR = (180, 175, 168)
CONNECTION_LINE_WIDTH = 0.5
# Particles and lines fainter than this are not drawn.
VISIBILITY_THRESHOLD = 0.01

# --- Rendering ---
BACKGROUND_COLOR = (250, 248, 243)  # Warm cream
# Alpha of the tint laid over the previous frame. Lower is a longer trail.
BACKGROUND_ALPHA = 0.03
SPRITE_SIZE = 32
# Sprite half-extent in pixels per unit of particle size.
SPRITE_SCALE = 4.0
SPRITE_CENTER_COLOR = (255, 252, 245, 0.9)
SPRITE_MID_STOP = 0.3
SPRITE_MID_ALPHA = 0.5
PRIMARY_COLOR = (154, 149, 144)  # Grey
ACCENT_COLOR = (196, 93, 58)     # Terracotta
MAX_PIXEL_SCALE = 2.0

# --- Frame Scheduling ---
TARGET_FPS = 30
FRAME_INTERVAL_MS = 1000.0 / TARGET_FPS

