#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
What this package needs to know about a VIRB video clip, and nothing more.

Reading MP4 containers is left to the caller: pass any object with the two
methods of `VideoProbe`.

"""


class VideoProbe:
    """Interface for reading VIRB clip metadata.

    Both methods may block on I/O and should raise OSError for files that
    can't be read.
    """

    def uuid(self, path):
        """The clip UUID embedded by the camera, or None if there isn't one.

        VIRB cameras write it into the MP4 ``udta`` box, and the same string
        is logged in the camera_event messages of the FIT file.
        """
        raise NotImplementedError

    def duration(self, path):
        """Clip duration in seconds, or None if unknown."""
        raise NotImplementedError
