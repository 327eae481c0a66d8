#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Recording sessions, as logged by the camera_event messages of a VIRB.

A VIRB splits a single recording into several clips (roughly every 15
minutes), each with its own UUID. The FIT log is the only place that ties
them together: between a video_start and a video_end event, every camera
event names the UUID of the clip being written at the time.

"""
import logging

from virbio.fit._profile import VIDEO_END, VIDEO_START


log = logging.getLogger(__name__)


class FitSession:
    """One recording session.

    Attributes
    ----------
    uuids : list of str
        Clip UUIDs in recording order, no duplicates.
    events : list of CameraEvent
        All camera events of the session, in file order.
    complete : bool
        False if the log ended before a video_end event.
    """
    __slots__ = ('uuids', 'events', 'complete')

    def __init__(self, events=None, complete=True):
        self.uuids = []
        self.events = []
        self.complete = complete
        for event in events or []:
            self.append(event)

    def append(self, event):
        self.events.append(event)
        if event.uuid is not None and event.uuid not in self.uuids:
            self.uuids.append(event.uuid)

    @property
    def start_event(self):
        return self.events[0]

    @property
    def end_event(self):
        return self.events[-1]

    @property
    def start(self):
        """Device time (seconds) of the first event."""
        return self.start_event.time

    @property
    def end(self):
        """Device time (seconds) of the last event."""
        return self.end_event.time

    @property
    def start_index(self):
        return self.start_event.index

    @property
    def index_range(self):
        """Data message indices spanned by the session, as a range."""
        return range(self.start_event.index, self.end_event.index + 1)

    def __len__(self):
        return len(self.uuids)

    def __iter__(self):
        return iter(self.uuids)

    def __contains__(self, uuid):
        return uuid in self.uuids

    def __repr__(self):
        return 'FitSession({!r}, start={:.3f}, complete={})'.format(
            self.uuids, self.start, self.complete)


def extract_sessions(camera_events):
    """Group camera events into recording sessions.

    Parameters
    ----------
    camera_events : iterable of CameraEvent
        In file order.

    Returns
    -------
    list of FitSession
        In file order. Sessions that never name a clip are left out.
    """
    sessions = []
    current = None

    def close(session, complete=True):
        session.complete = complete
        if session.uuids:
            sessions.append(session)

    for event in camera_events:
        if event.event_type == VIDEO_START:
            if current is not None:
                log.warning('video_start at index %d before the previous '
                            'session ended; closing it', event.index)
                close(current, complete=False)
            current = FitSession()

        elif current is None:
            if event.uuid is None:
                continue    # e.g. photo_taken outside of a recording
            current = FitSession()

        current.append(event)

        if event.event_type == VIDEO_END:
            close(current)
            current = None

    if current is not None:
        log.warning('session starting at index %d has no video_end event',
                    current.start_index)
        close(current, complete=False)

    log.info('%d recording session(s) found', len(sessions))
    return sessions
