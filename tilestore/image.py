# This file is part of the TileStore project.
# Copyright (C) 2026 The TileStore Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Decoding of stored tile data.
"""

from io import BytesIO

from PIL import Image

import logging
log = logging.getLogger(__name__)


magic_bytes = [
    ('png', (b"\211PNG\r\n\032\n",)),
    ('jpeg', (b"\xFF\xD8",)),
    ('tiff', (b"MM\x00\x2a", b"II\x2a\x00",)),
    ('gif', (b"GIF87a", b"GIF89a",)),
]


def peek_image_format(data):
    """
    >>> peek_image_format(b"\\211PNG\\r\\n\\032\\n...")
    'png'
    >>> peek_image_format(b"foo") is None
    True
    """
    header = bytes(data[:10])
    for format, bytes_ in magic_bytes:
        if header.startswith(bytes_):
            return format
    return None


class ImageSource(object):
    """
    This class wraps the encoded data of a tile.
    You can access the result as an image (`as_image`), a file-like buffer
    object (`as_buffer`) or as plain bytes (`as_bytes`).

    The image is only decoded on the first `as_image` call, so creating
    an ImageSource for cached tile data never fails.
    """

    def __init__(self, data):
        self._data = bytes(data)
        self._img = None

    @property
    def format(self):
        return peek_image_format(self._data)

    def as_bytes(self):
        return self._data

    def as_buffer(self):
        return BytesIO(self._data)

    def as_image(self):
        """
        Returns the decoded image.

        :rtype: PIL `Image`
        """
        if self._img is None:
            log.debug('decoding %d bytes (%s)', len(self._data), self.format)
            img = Image.open(self.as_buffer())
            img.load()
            self._img = img
        return self._img

    @property
    def size(self):
        return self.as_image().size

    def __len__(self):
        return len(self._data)

    def __eq__(self, other):
        if isinstance(other, ImageSource):
            return self._data == other._data
        return NotImplemented

    def __hash__(self):
        return hash(self._data)

    def __repr__(self):
        return '<ImageSource format=%s size=%d bytes>' % (self.format, len(self._data))
