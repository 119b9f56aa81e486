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

import os
import shutil
import tempfile

import pytest

from tilestore.cache.sql import SQLTileCache
from tilestore.test.helper import RecordingDecoder
from tilestore.test.image import create_tmp_image


@pytest.fixture
def cache_dir():
    cache_dir = tempfile.mkdtemp()
    yield cache_dir
    shutil.rmtree(cache_dir, ignore_errors=True)


@pytest.fixture
def decoder():
    return RecordingDecoder()


@pytest.fixture
def sqlite_cache(cache_dir, decoder):
    cache = SQLTileCache('sqlite:///' + os.path.join(cache_dir, 'tiles.db'), decoder, timeout=5)
    yield cache
    cache.close()


@pytest.fixture(scope='session')
def png_tile():
    return create_tmp_image((256, 256), color='blue')
