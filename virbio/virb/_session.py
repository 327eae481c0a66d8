#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
VIRB recording sessions: a FIT log, the clips it names, and the clips found
on disk.

"""
from datetime import timedelta
import logging

from virbio import fit
from virbio.virb._files import (
    FIT_EXTENSIONS, find_files, index_videos, match_clips)
from virbio._types.gpsdata import DEFAULT_DOWNSAMPLE, DEFAULT_MIN_FIX
from virbio._util.exceptions import (
    FitDecodeError, MissingVideo, NoSuchSession, SessionError)


log = logging.getLogger(__name__)


class VirbSession:
    """One recording session, with its clips matched to files.

    Parameters
    ----------
    fit_path : str
    fit_session : FitSession
    clips : list of VirbClip
        Matched clips, in recording order.
    fitdata : FitData
        The decoded FIT file at `fit_path`.
    time_offset : int or float, optional
        Hours added to the absolute times, e.g. to get local time.
    """
    def __init__(self, fit_path, fit_session, clips, fitdata, *,
                 time_offset=0):
        self.fit_path = fit_path
        self.fit_session = fit_session
        self.clips = clips
        self.fitdata = fitdata
        self.time_offset = time_offset

    def __repr__(self):
        return 'VirbSession({!r}, {:d}/{:d} clips)'.format(
            self.fit_path, len(self.clips), len(self.fit_session))

    @property
    def uuids(self):
        return list(self.fit_session.uuids)

    @property
    def first_uuid(self):
        return self.fit_session.uuids[0]

    def process(self, time_offset):
        """Set a new time offset (hours); returns self for chaining."""
        self.time_offset = time_offset
        return self

    @property
    def t0(self):
        """Absolute start time of the session.

        Raises
        ------
        MissingTimestampCorrelation
        """
        return self.fitdata.t0(start=self.fit_session.start,
                               offset_hours=self.time_offset,
                               index=self.fit_session.start_index)

    @property
    def duration(self):
        """Seconds, from clip durations where all of them are known."""
        durations = [clip.duration for clip in self.clips]
        if durations and None not in durations:
            return float(sum(durations))
        return self.fit_session.end - self.fit_session.start

    @property
    def end(self):
        """Absolute end time of the session."""
        return self.t0 + timedelta(seconds=self.duration)

    def _paths(self, kind, strict):
        paths = [getattr(clip, kind) for clip in self.clips]
        if strict and (not paths or None in paths):
            raise MissingVideo('no {} file for some clips of session {}'
                               .format(kind, self.first_uuid))
        return [path for path in paths if path is not None]

    def mp4(self, strict=False):
        """High resolution clip paths, in recording order."""
        return self._paths('mp4', strict)

    def glv(self, strict=False):
        """Low resolution clip paths, in recording order."""
        return self._paths('glv', strict)

    def gps(self, min_fix=DEFAULT_MIN_FIX, max_dop=None,
            downsample=DEFAULT_DOWNSAMPLE):
        """GPS points of the session, ready for a timeline.

        Pruned, downsampled, then given durations and absolute times.

        Returns
        -------
        GpsPoints
        """
        start = self.fit_session.start
        points = self.fitdata.gps_points(self.fit_session.index_range,
                                         start=start)
        points = points.prune(min_fix, max_dop).downsample(downsample)
        return (points.set_durations(self.duration)
                      .set_datetimes(self.t0))

    def sensor(self, kind):
        """Sensor samples logged during the session."""
        return self.fitdata.sensor(kind, self.fit_session.index_range)

    @classmethod
    def from_fit(cls, path, directory, probe, uuid=None, *, time_offset=0,
                 workers=None, fitdata=None, index=None):
        """The session in the FIT file at `path`.

        Parameters
        ----------
        path : str
        directory : str
            Where to look for clips.
        probe : VideoProbe
        uuid : str, optional
            Any clip UUID of the session. Required if the file has more
            than one session.
        time_offset : int or float, optional
        workers : int, optional
            Threads for probing videos.

        Raises
        ------
        NoSuchSession
            If there is no session (for `uuid`), several sessions but no
            `uuid`, or no clips of the session under `directory`.
        FitDecodeError
            If the FIT file is corrupt.
        """
        if fitdata is None:
            fitdata = fit.read(path)
        sessions = fitdata.sessions()

        if uuid is not None:
            sessions = [session for session in sessions if uuid in session]
            if not sessions:
                raise NoSuchSession('no session with uuid {} in {}'
                                    .format(uuid, path))
        elif not sessions:
            raise NoSuchSession('no sessions in {}'.format(path))
        elif len(sessions) > 1:
            raise NoSuchSession('{} has {:d} sessions; pick one by uuid'
                                .format(path, len(sessions)))
        fit_session = sessions[0]

        if index is None:
            index = index_videos(directory, probe, workers=workers)
        clips = match_clips(fit_session.uuids, index)
        if not clips:
            raise NoSuchSession('no clips of session {} under {}'
                                .format(fit_session.uuids[0], directory))

        return cls(path, fit_session, clips, fitdata, time_offset=time_offset)

    @classmethod
    def from_uuid(cls, uuid, directory, probe, *, time_offset=0,
                  workers=None):
        """The session with clip `uuid`, from the FIT files in `directory`.

        Raises
        ------
        NoSuchSession
        """
        index = None
        for path in find_files(directory, FIT_EXTENSIONS):
            try:
                fitdata = fit.read(path)
            except (FitDecodeError, OSError) as err:
                log.warning('skipping %s: %s', path, err)
                continue

            if not any(uuid in session for session in fitdata.sessions()):
                continue
            if index is None:
                index = index_videos(directory, probe, workers=workers)
            return cls.from_fit(path, directory, probe, uuid,
                                time_offset=time_offset, fitdata=fitdata,
                                index=index)

        raise NoSuchSession('no fit file under {} logs uuid {}'
                            .format(directory, uuid))

    @classmethod
    def from_video(cls, path, directory, probe, *, time_offset=0,
                   workers=None):
        """The session that the clip at `path` belongs to.

        Raises
        ------
        MissingVideo
            If the clip has no UUID.
        NoSuchSession
        """
        uuid = probe.uuid(path)
        if uuid is None:
            raise MissingVideo('no uuid in {}'.format(path))
        return cls.from_uuid(uuid, directory, probe, time_offset=time_offset,
                             workers=workers)


def _sort_key(session):
    try:
        return False, session.t0
    except SessionError:
        return True, None


def sessions_from_path(directory, probe, *, workers=None, time_offset=0):
    """Every session, of every FIT file under `directory`, with clips.

    FIT files that can't be decoded and sessions without clips are logged
    and skipped.

    Returns
    -------
    list of VirbSession
        Sorted by start time; sessions whose start can't be determined last.
    """
    index = index_videos(directory, probe, workers=workers)

    sessions = []
    for path in find_files(directory, FIT_EXTENSIONS):
        try:
            fitdata = fit.read(path)
        except (FitDecodeError, OSError) as err:
            log.warning('skipping %s: %s', path, err)
            continue

        for fit_session in fitdata.sessions():
            clips = match_clips(fit_session.uuids, index)
            if not clips:
                log.warning('skipping session %s in %s: no clips found',
                            fit_session.uuids[0], path)
                continue
            sessions.append(VirbSession(path, fit_session, clips, fitdata,
                                        time_offset=time_offset))

    return sorted(sessions, key=_sort_key)
