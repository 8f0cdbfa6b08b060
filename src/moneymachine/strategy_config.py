# AI Money Machine Strategy Configuration

# Sentiment thresholds (score runs 0-100, 50 is neutral)
SENTIMENT = {
    "MIN": 0,
    "MAX": 100,
    "BUY_ABOVE": 75,    # BUY fires when the score crosses above this
    "SHORT_BELOW": 25,  # SHORT fires when the score crosses below this
    "NEW_NODE": 50,
}

# Sentiment delta per news impact level
IMPACT_SCORES = {
    "HIGH": 15,
    "MEDIUM": 5,
    "LOW": 5,
}

# Simulation clock
SIMULATION = {
    "TICK_SECONDS": 3.0,
    "EVENT_PROBABILITY": 0.3,
}

# Bounded in-memory feeds and persisted tables
CAPS = {
    "NEWS_FEED": 20,
    "SIGNAL_FEED": 10,
    "STORE_TABLE": 50,
}

# Graph growth
LINKS = {
    "EVENT_INCREMENT": 2,   # value added to an existing flow by news
    "EVENT_NEW_VALUE": 2,   # value of a flow created by news
    "INTEGRATED_VALUE": 3,  # value of a flow found for an added ticker
    "NEW_NODE_VAL": 20,
}

# Force simulation (passed through to the layout library)
LAYOUT = {
    "WIDTH": 800,
    "HEIGHT": 600,
    "LINK_DISTANCE": 180,
    "CHARGE": -500,
    "COLLIDE_PADDING": 20,
    "ITERATIONS": 50,
    "WARM_ITERATIONS": 10,  # when every node already has a position
    "SEED": 42,
}
