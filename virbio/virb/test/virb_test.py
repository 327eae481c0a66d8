#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from datetime import timedelta
import os

import pytest

from virbio.virb import (
    VideoProbe, VirbSession, find_files, index_videos, match_clips,
    sessions_from_path)
from virbio._util.exceptions import MissingVideo, NoSuchSession
from virbio._util.misc import FIT_EPOCH, SEMICIRCLES_PER_DEGREE


class FakeProbe(VideoProbe):
    """Clip metadata by file name; files named 'broken*' can't be read."""

    def __init__(self, clips):
        self.clips = clips     # {file name: (uuid, duration)}
        self.probed = []

    def _lookup(self, path):
        name = os.path.basename(path)
        self.probed.append(name)
        if name.startswith('broken'):
            raise OSError('cannot read ' + name)
        return self.clips.get(name, (None, None))

    def uuid(self, path):
        return self._lookup(path)[0]

    def duration(self, path):
        return self._lookup(path)[1]


def touch(directory, *names):
    for name in names:
        path = os.path.join(str(directory), name)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'wb'):
            pass


def write_fit(builder, path, *records):
    with open(str(path), 'wb') as f:
        f.write(builder.file(*records).getvalue())


def session_records(builder, uuids, start=100, utc=10**9, system=50):
    """video_start, 2.5s of 10Hz GPS, a split per clip, then video_end."""
    lat = int(50 * SEMICIRCLES_PER_DEGREE)
    events = [(start, 0, 0, uuids[0])]
    events += [(start + 10 * i, 0, 1, uuid)
               for i, uuid in enumerate(uuids[1:], 1)]
    events.append((start + 10 * len(uuids), 0, 2, uuids[-1]))
    camera = builder.camera_events(1, events)
    gps = builder.gps(2, [(start + i // 10, (i % 10) * 100, lat)
                          for i in range(25)])
    return [*builder.correlation(0, utc, system),
            *camera[:2], *gps, *camera[2:]]


@pytest.fixture
def probe():
    return FakeProbe({'V0002.MP4': ('B', 60.0),
                      'V0002.GLV': ('B', 60.0),
                      'V0003.MP4': ('C', 30.0),
                      'other.mp4': (None, None)})


@pytest.fixture
def virb_dir(tmp_path, builder):
    touch(tmp_path, 'DCIM/V0002.MP4', 'DCIM/V0002.GLV', 'DCIM/V0003.MP4',
          'DCIM/other.mp4', 'DCIM/notes.txt', '.trash/V0001.MP4',
          'DCIM/.V0009.MP4')
    (tmp_path / 'GMetrix').mkdir()
    write_fit(builder, tmp_path / 'GMetrix' / '2019-03-25.fit',
              *session_records(builder, ['A', 'B', 'C']))
    return tmp_path


def test_find_files_skips_hidden(virb_dir):
    found = [os.path.relpath(path, str(virb_dir))
             for path in find_files(str(virb_dir), ('.mp4', '.glv'))]
    assert found == [os.path.join('DCIM', name) for name in
                     ('V0002.GLV', 'V0002.MP4', 'V0003.MP4', 'other.mp4')]


@pytest.mark.parametrize('workers', [None, 2])
def test_index_videos(virb_dir, probe, workers):
    index = index_videos(str(virb_dir), probe, workers=workers)
    assert sorted(index) == ['B', 'C']
    assert index['B'].mp4.endswith('V0002.MP4')
    assert index['B'].glv.endswith('V0002.GLV')
    assert index['C'].glv is None
    assert index['C'].path.endswith('V0003.MP4')


def test_unreadable_videos_are_skipped(virb_dir, probe):
    touch(virb_dir, 'DCIM/broken.MP4')
    index = index_videos(str(virb_dir), probe)
    assert sorted(index) == ['B', 'C']
    assert 'broken.MP4' in probe.probed


def test_match_clips_keeps_manifest_order(virb_dir, probe):
    index = index_videos(str(virb_dir), probe)
    clips = match_clips(['C', 'A', 'B'], index)
    assert [clip.uuid for clip in clips] == ['C', 'B']


def test_from_fit(virb_dir, probe):
    path = str(virb_dir / 'GMetrix' / '2019-03-25.fit')
    session = VirbSession.from_fit(path, str(virb_dir), probe)

    assert session.uuids == ['A', 'B', 'C']
    assert [clip.uuid for clip in session.clips] == ['B', 'C']
    assert session.mp4()[0].endswith('V0002.MP4')
    assert len(session.glv()) == 1
    with pytest.raises(MissingVideo):
        session.glv(strict=True)

    t0 = FIT_EPOCH + timedelta(seconds=10**9 - 50 + 100)
    assert session.t0 == t0
    assert session.duration == 90
    assert session.end == t0 + timedelta(seconds=90)

    session.process(time_offset=2)
    assert session.t0 == t0 + timedelta(hours=2)


def test_from_fit_unknown_uuid(virb_dir, probe):
    path = str(virb_dir / 'GMetrix' / '2019-03-25.fit')
    with pytest.raises(NoSuchSession):
        VirbSession.from_fit(path, str(virb_dir), probe, uuid='X')


def test_from_fit_without_clips(tmp_path, builder, probe):
    path = tmp_path / 'lonely.fit'
    write_fit(builder, path, *session_records(builder, ['X', 'Y']))
    with pytest.raises(NoSuchSession):
        VirbSession.from_fit(str(path), str(tmp_path), probe)


def test_from_uuid_and_video(virb_dir, probe):
    session = VirbSession.from_uuid('C', str(virb_dir), probe)
    assert session.fit_path.endswith('2019-03-25.fit')

    video = str(virb_dir / 'DCIM' / 'V0002.MP4')
    assert VirbSession.from_video(video, str(virb_dir), probe).uuids == [
        'A', 'B', 'C']

    with pytest.raises(NoSuchSession):
        VirbSession.from_uuid('X', str(virb_dir), probe)
    with pytest.raises(MissingVideo):
        VirbSession.from_video(str(virb_dir / 'DCIM' / 'other.mp4'),
                               str(virb_dir), probe)


def test_gps(virb_dir, probe):
    path = str(virb_dir / 'GMetrix' / '2019-03-25.fit')
    session = VirbSession.from_fit(path, str(virb_dir), probe)

    gps = session.gps()

    assert gps['timestamp'].tolist() == [0, 1, 2]
    assert gps['duration'].tolist() == [1, 1, 88]
    assert gps['duration'].sum() == session.duration
    assert gps['datetime'].iloc[0] == session.t0
    assert gps['latitude'].tolist() == pytest.approx([50] * 3)
    assert len(session.gps(downsample=1)) == 25


def test_sessions_from_path(virb_dir, probe, builder):
    # An earlier session, a corrupt file and a session with no clips.
    write_fit(builder, virb_dir / 'GMetrix' / '2019-03-24.fit',
              *session_records(builder, ['C'], utc=10**9 - 86400))
    write_fit(builder, virb_dir / 'GMetrix' / 'corrupt.fit')
    with open(str(virb_dir / 'GMetrix' / 'corrupt.fit'), 'r+b') as f:
        f.write(b'\x0e\x10\x00\x00\x05\x00\x00\x00.FIT')
    write_fit(builder, virb_dir / 'GMetrix' / 'lonely.fit',
              *session_records(builder, ['X']))

    sessions = sessions_from_path(str(virb_dir), probe)

    assert [os.path.basename(s.fit_path) for s in sessions] == [
        '2019-03-24.fit', '2019-03-25.fit']
    assert sessions[0].t0 < sessions[1].t0


def test_unreadable_fit_files_are_skipped(virb_dir, probe):
    os.symlink(str(virb_dir / 'missing.fit'),
               str(virb_dir / 'GMetrix' / 'a_bad.fit'))

    sessions = sessions_from_path(str(virb_dir), probe)
    assert [os.path.basename(s.fit_path) for s in sessions] == [
        '2019-03-25.fit']

    session = VirbSession.from_uuid('B', str(virb_dir), probe)
    assert session.fit_path.endswith('2019-03-25.fit')
