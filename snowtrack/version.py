VERSION = "0.1.0"

# Sent as ``tv`` with every event
TRACKER_VERSION = f"py-{VERSION}"
