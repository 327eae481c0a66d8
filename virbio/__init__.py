__version__ = '0.1.0'

# Garmin VIRB telemetry handling: decode FIT files written by VIRB action
# cameras and stitch the recording sessions they describe back together
# with the video clips on disk.

from virbio import fit
from virbio.virb import VirbSession, sessions_from_path
