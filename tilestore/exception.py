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
Errors that are raised to the caller instead of degrading into cache misses.
"""


class ConfigurationError(ValueError):
    """
    Invalid or missing configuration, e.g. an unknown connection string
    scheme or an invalid table name. Raised at construction time.
    """
    pass


class NotSupportedError(NotImplementedError):
    """
    The operation is not supported by this cache.
    """
    pass
