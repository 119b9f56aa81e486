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

import pytest

from PIL import Image

from tilestore.image import ImageSource, peek_image_format
from tilestore.test.image import create_tmp_image, is_png


class TestImageSource(object):

    def test_png(self):
        data = create_tmp_image((256, 256), color='red')
        source = ImageSource(data)
        assert source.format == 'png'
        assert source.as_bytes() == data
        assert is_png(source.as_buffer().read())
        assert len(source) == len(data)

        img = source.as_image()
        assert isinstance(img, Image.Image)
        assert img.size == (256, 256)
        assert img.getpixel((0, 0)) == (255, 0, 0)
        assert source.size == (256, 256)

    def test_jpeg(self):
        source = ImageSource(create_tmp_image((64, 32), format='jpeg', color='white'))
        assert source.format == 'jpeg'
        assert source.size == (64, 32)

    def test_memoryview(self):
        data = create_tmp_image((8, 8), color='blue')
        assert ImageSource(memoryview(data)).as_bytes() == data

    def test_lazy_decoding(self):
        source = ImageSource(b'not an image')
        assert source.format is None
        with pytest.raises(IOError):
            source.as_image()

    def test_eq(self):
        data = create_tmp_image((8, 8), color='blue')
        assert ImageSource(data) == ImageSource(data)
        assert ImageSource(data) != ImageSource(create_tmp_image((8, 8), color='red'))
        assert ImageSource(data) != data
        assert len(set([ImageSource(data), ImageSource(data)])) == 1


class TestPeekImageFormat(object):

    @pytest.mark.parametrize('format,expected', [
        ('png', 'png'), ('jpeg', 'jpeg'), ('gif', 'gif'), ('tiff', 'tiff'),
    ])
    def test_formats(self, format, expected):
        assert peek_image_format(create_tmp_image((8, 8), format=format, color='white')) == expected

    def test_unknown(self):
        assert peek_image_format(b'') is None
        assert peek_image_format(b'foo') is None
