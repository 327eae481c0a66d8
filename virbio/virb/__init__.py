"""
Garmin VIRB recording sessions.

A VIRB writes a single FIT log per power cycle, and splits each recording into
clips. The FIT log names the clips by UUID (see `virbio.fit.extract_sessions`);
this subpackage finds those clips on disk and works out when they were shot.

Reading MP4 metadata is up to the caller, via a `VideoProbe`.

"""
from virbio.fit._sessions import FitSession, extract_sessions
from virbio.virb._files import VirbClip, find_files, index_videos, match_clips
from virbio.virb._probe import VideoProbe
from virbio.virb._session import VirbSession, sessions_from_path
