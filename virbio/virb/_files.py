#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Locate VIRB files on disk and pair clips with their UUIDs.

Each clip is written twice by the camera: a high resolution *.MP4 and a low
resolution *.GLV (same container, different extension). Both carry the same
UUID, which is how they are paired; file names are not reliable.

"""
from concurrent.futures import ThreadPoolExecutor
import logging
import os


log = logging.getLogger(__name__)

VIDEO_EXTENSIONS = ('.mp4', '.glv')
FIT_EXTENSIONS = ('.fit',)


def is_hidden(name):
    return name.startswith('.')


def has_extension(path, extensions):
    return os.path.splitext(path)[1].lower() in extensions


def find_files(directory, extensions):
    """Sorted paths under `directory` with any of `extensions` (lowercase).

    Hidden files and directories are skipped, as are directories that can't
    be listed (a warning is logged).
    """
    def onerror(err):
        log.warning('skipping %s: %s', err.filename, err.strerror)

    found = []
    for root, dirs, files in os.walk(directory, onerror=onerror):
        dirs[:] = [name for name in dirs if not is_hidden(name)]
        found.extend(os.path.join(root, name) for name in files
                     if not is_hidden(name) and
                     has_extension(name, extensions))
    return sorted(found)


class VirbClip:
    """The high (mp4) and low (glv) resolution files of one clip."""
    __slots__ = ('uuid', 'mp4', 'glv', 'duration')

    def __init__(self, uuid, mp4=None, glv=None, duration=None):
        self.uuid = uuid
        self.mp4 = mp4
        self.glv = glv
        self.duration = duration

    def add(self, path, duration=None):
        if has_extension(path, ('.glv',)):
            self.glv = path
        else:
            self.mp4 = path
        if self.duration is None:
            self.duration = duration

    @property
    def path(self):
        """Preferably the high resolution file."""
        return self.mp4 or self.glv

    def __repr__(self):
        return 'VirbClip({!r}, mp4={!r}, glv={!r})'.format(
            self.uuid, self.mp4, self.glv)


def _probe_file(probe, path):
    try:
        uuid = probe.uuid(path)
        duration = probe.duration(path) if uuid is not None else None
    except OSError as err:
        log.warning('could not read %s: %s', path, err)
        return path, None, None
    log.debug('%s: uuid %r, duration %r', path, uuid, duration)
    return path, uuid, duration


def index_videos(directory, probe, *, workers=None):
    """Find the VIRB clips under `directory`.

    Parameters
    ----------
    directory : str
    probe : VideoProbe
    workers : int, optional
        Probe this many files at once, in threads. Sequential by default.

    Returns
    -------
    dict
        {uuid: VirbClip}. Videos without a UUID (i.e. not from a VIRB) and
        unreadable videos are left out.
    """
    paths = find_files(directory, VIDEO_EXTENSIONS)

    if workers:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(
                lambda path: _probe_file(probe, path), paths))
    else:
        results = [_probe_file(probe, path) for path in paths]

    index = {}
    for path, uuid, duration in results:   # in path order, either way
        if uuid is None:
            continue
        index.setdefault(uuid, VirbClip(uuid)).add(path, duration)
    return index


def match_clips(manifest, index):
    """Clips for the UUIDs in `manifest` that were found, in manifest order."""
    return [index[uuid] for uuid in manifest if uuid in index]
