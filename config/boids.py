"""Configuration for the 3D Boids flocking engine."""

BOIDS = {
    "count": 50,
    "visibility_threshold": 50.0,  # Neighbour radius (strict <)
    "angular_threshold": 180.0,    # Degrees; 180 = see all around
    "max_speed": 0.5,
    "world": "Default",
    "seed": None,
}

RANDOMNESS = {
    "per_timestep": 0.01,   # Bias drift per tick (uniform, per axis)
    "limit": 0.1,           # Bias is divided by 100 once it exceeds this
    "reset_divisor": 100.0,
}

# Initial velocity ranges for newly spawned boids
SPAWN = {
    "velocity_min": (-0.2, -0.02, -0.2),
    "velocity_max": (0.2, 0.02, 0.2),
}

# Ordered rule list; max_weight defaults to 2 * weight
RULES = [
    {"key": "separation", "weight": 0.8},
    {"key": "cohesion", "weight": 1.0},
    {"key": "alignment", "weight": 1.0},
    {"key": "world_boundary", "weight": 10.0, "margin": 10.0},
    {"key": "obstacle_avoidance", "weight": 10.0, "sharpness": 3.0, "offset": 10.0},
]

# Extra rules switched on by optional behaviours
LEADER_RULE = {"key": "leader_following", "weight": 1.5}
PREDATOR_RULE = {"key": "predator_avoidance", "weight": 2.0, "radius": 30.0}

DROPOFFS = {
    "active": "none",
    "constant": 1.0,
}

LEADERS = {
    "enabled": False,
    "neighbour_count_threshold": 3,
    "eccentricity_threshold": 0.9,   # 1.0 = perfectly straight path
    "become_leader_probability": 0.002,
    "max_leader_ticks": 200,
    "peak_speed_multiplier": 1.6,
    "ramp_fraction": 0.25,           # Share of tenure spent speeding up
    "history_length": 20,
}

# Control-panel ranges for every bounded tunable (inclusive)
PARAM_BOUNDS = {
    "boid_count": (0, 500),
    "max_speed": (0.1, 2.0),
    "visibility_threshold": (5.0, 100.0),
    "angular_threshold": (10.0, 180.0),
    "randomness_per_timestep": (0.0, 0.02),
    "randomness_limit": (0.0, 0.5),
}

# World registry: bounds are (x_size, z_size, y_size) centred on x/z, floor at y=0
WORLDS = [
    {
        "name": "Default",
        "bounds": (200.0, 200.0, 100.0),
        "cylinders": [],
    },
    {
        "name": "Forest",
        "bounds": (300.0, 300.0, 120.0),
        "cylinders": [
            {"base": (-80.0, -60.0), "radius": 8.0},
            {"base": (-20.0, 70.0), "radius": 6.0},
            {"base": (40.0, -30.0), "radius": 10.0},
            {"base": (90.0, 80.0), "radius": 7.0},
            {"base": (10.0, 10.0), "radius": 5.0},
        ],
    },
    {
        "name": "Columns",
        "bounds": (200.0, 200.0, 150.0),
        "cylinders": [
            {"base": (-50.0, -50.0), "radius": 12.0},
            {"base": (50.0, -50.0), "radius": 12.0},
            {"base": (-50.0, 50.0), "radius": 12.0},
            {"base": (50.0, 50.0), "radius": 12.0},
        ],
    },
]
