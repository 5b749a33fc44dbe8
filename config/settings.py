"""
Application configuration
"""
import os
from dotenv import load_dotenv

load_dotenv()

# Host console access
HOST_PASSWORD = os.getenv('HOST_PASSWORD', '')

# Rooms
DEFAULT_ROOM_CODE = os.getenv('DEFAULT_ROOM_CODE', 'VTRY')

# Paths
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
MEDIA_DIR = os.getenv('MEDIA_DIR', os.path.join(BASE_DIR, 'media'))
MEDIA_URL = os.getenv('MEDIA_URL', '/media')

# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
DEBUG_RANDOM = os.getenv('DEBUG_RANDOM', '0') == '1'

# Timers
TIMER_POLL_SECONDS = float(os.getenv('TIMER_POLL_SECONDS', '0.5'))
PRESENCE_TTL_SECONDS = int(os.getenv('PRESENCE_TTL_SECONDS', '30'))

# Game
MAX_BLUFFERS = int(os.getenv('MAX_BLUFFERS', '3'))

# CORS
WEBAPP_ORIGINS = [
    origin.strip()
    for origin in os.getenv('WEBAPP_ORIGINS', '').split(',')
    if origin.strip()
] or ['*']
