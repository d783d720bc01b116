# --- Display ---
WIDTH = 800
HEIGHT = 400
FPS = 60

# --- Terrain ---
TERRAIN_BASE_FRAC = 0.35        # vertical offset as a fraction of HEIGHT
TERRAIN_WAVES = ((0.006, 25.0), (0.003, 40.0))   # (frequency, amplitude)
TERRAIN_DRIFT = 0.08            # linear term, px of y per px of x
TERRAIN_FLOOR_MARGIN = 50       # terrain never goes below HEIGHT - margin
GRADIENT_STEP = 8.0             # finite-difference half step (px)

# Ramp lip carved just before every hole
BUMP_LEAD = 80.0                # bump centre sits this far before the hole
BUMP_HALF_WIDTH = 60.0
BUMP_HEIGHT = 25.0

# --- Holes ---
HOLES = ((300.0, 25.0), (500.0, 25.0))   # (x, radius)
HOLE_SURFACE_OFFSET = 15.0      # hole centre sits below the surface
HOLE_KILL_MARGIN = 5.0          # fatal when closer than radius - margin

# --- Rider ---
RIDER_START_X = 50.0
RIDER_START_Y = 50.0
RIDER_W = 30
RIDER_H = 30
TRAIL_LEN = 100

# --- Physics (per frame) ---
GRAVITY = 0.5
GROUND_FRICTION = 0.95
AIR_RESISTANCE = 0.98
SLOPE_PULL = 300.0              # gradient -> speed
MOMENTUM_PUSH = 50.0            # momentum -> speed
MOMENTUM_STEP = 0.1
MOMENTUM_MAX = 2.0
MOMENTUM_SLOPE = 0.05           # |gradient| needed to charge/drain momentum
STALL_SLOPE = -0.1
STALL_SPEED = 3.0
SLIDE_BACK = 20.0
LAUNCH_LOOKAHEAD = 10.0
LAUNCH_CREST = 0.15             # gradient change that counts as a crest
LAUNCH_CREST_SPEED = 5.0
LAUNCH_RAMP = -0.25
LAUNCH_RAMP_SPEED = 8.0
LAUNCH_KICK = 0.4
HARD_LANDING_VY = 10.0
SCORE_PER_SPEED = 0.1

# --- Goal (lodge) ---
LODGE_X = WIDTH - 100
LODGE_W = 60
LODGE_H = 50
LODGE_REACH_X = 30
LODGE_REACH_Y = 50
LODGE_BONUS = 1000.0

# --- Control ("learning rate") ---
LR_DEFAULT = 0.1
LR_MIN = 0.0
LR_MAX = 1.0
LR_STEP = 0.01

# --- Tick driver ---
FRAME_DT = 1.0 / FPS
MAX_STEPS_PER_ADVANCE = 4       # drop backlog after stalls

# --- Env ---
MAX_VX = 30.0                   # speed normalisation
MAX_VY = 30.0
SLOPE_LOOKAHEAD_OFFSETS = (0, 40, 80, 120)
CRASH_PENALTY = 100.0
DEBUG_OVERLAY = False

# --- Colors (RGB) ---
COLOR_SKY = (135, 206, 235)
COLOR_SNOW = (255, 255, 255)
COLOR_HOLE = (65, 105, 225)
COLOR_RIDER = (0, 0, 0)
COLOR_TRAIL_GROUND = (100, 100, 255)
COLOR_TRAIL_AIR = (255, 100, 100)
COLOR_LODGE = (139, 69, 19)
COLOR_ROOF = (178, 34, 34)
COLOR_FG = (20, 30, 50)
COLOR_ACCENT = (120, 200, 255)
COLOR_PANEL = (40, 60, 90)
