# ==================== CONFIGURATION ====================
# Fixed values for the explosion demo. The time windows must match the
# instruction video, so only change them together with the video.

# Pose time windows (seconds of instruction video playback, inclusive)
POSE_TIME_WINDOWS = {
    1: (22.0, 23.0),
    2: (25.0, 26.0),
    3: (33.0, 34.0),
    4: (37.0, 38.0),
    5: (42.0, 43.0),
    6: (58.0, 59.0),
}

# Trigger
CONFIDENCE_THRESHOLD = 0.8          # Probability must be strictly above this to fire
EXPLOSION_COOLDOWN = 0.3            # Seconds the effect stays active after a trigger

# Rendering
MIN_PART_CONFIDENCE = 0.5           # Keypoints at or below this score are not drawn
MARKER_BASE_RADIUS = 10             # Explosion marker radius before scaling (px)
MARKER_SCALE = 3                    # Explosion marker radius multiplier
EXPLOSION_COLOR = (0, 0, 255)       # BGR red (#FF0000)
KEYPOINT_COLOR = (0, 255, 255)      # BGR aqua
SKELETON_COLOR = (0, 255, 255)
KEYPOINT_RADIUS = 4
SKELETON_THICKNESS = 2
HUD_COLOR = (255, 255, 255)

# Capture
WEBCAM_WIDTH = 600
WEBCAM_HEIGHT = 600
WEBCAM_FLIP = True                  # Mirror horizontally

# Assets
DEFAULT_MODEL_URL = "https://teachablemachine.withgoogle.com/models/t594TCPs4/"
MODEL_FILENAME = "model.json"       # Topology descriptor
METADATA_FILENAME = "metadata.json"
DEFAULT_VIDEO_PATH = "vid.mp4"
DEFAULT_SOUND_PATH = "explsn.mp3"
VIDEO_VOLUME = 0.4
EXPLOSION_VOLUME = 1.0

WINDOW_TITLE = "Pose Burst"
