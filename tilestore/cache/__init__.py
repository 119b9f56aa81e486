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
Tile caching (storage and retrieval of map tiles in a relational database).

.. digraph:: Schematic Call Graph

    ranksep = 0.1;
    node [shape="box", height="0", width="0"]

    map     [label="map client"];
    sc      [label="SQLTileCache", href="<tilestore.cache.sql.SQLTileCache>"];
    d       [label="Dialect", href="<tilestore.cache.dialect.Dialect>"];
    dec     [label="decoder", href="<tilestore.image.ImageSource>"];

    {
        map -> sc [label="get_image_from_cache\\nput_image_to_cache"];
        sc -> d   [label="connect\\ncreate_table"];
        sc -> dec [label="bytes"];
    }

"""
