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

import optparse
import sys
import logging

from tilestore.exception import ConfigurationError
from tilestore.version import version


def setup_logging(level=logging.INFO, format=None):
    tilestore_log = logging.getLogger('tilestore')
    tilestore_log.setLevel(level)

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    if not format:
        format = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
    formatter = logging.Formatter(format)
    ch.setFormatter(formatter)
    tilestore_log.addHandler(ch)


def add_common_options(parser):
    parser.add_option("-f", "--config",
                      dest="config_file", default=None,
                      help="TileStore configuration file.")
    parser.add_option("--debug", default=False, action='store_true',
                      dest="debug",
                      help="Enable debug logging")


def add_key_options(parser):
    parser.add_option("--type", dest="type", type="int", help="Tile type (provider id).")
    parser.add_option("--zoom", dest="zoom", type="int", help="Zoom level.")
    parser.add_option("-x", dest="x", type="int", help="Tile column.")
    parser.add_option("-y", dest="y", type="int", help="Tile row.")


def check_key_options(parser, options):
    missing = [opt for opt in ('type', 'zoom', 'x', 'y') if getattr(options, opt) is None]
    if missing:
        parser.print_help()
        print("\nERROR: missing option(s): %s" % ', '.join('--' + m if len(m) > 1 else '-' + m for m in missing),
              file=sys.stderr)
        return False
    return True


def load_cache(parser, options):
    """
    Return the configured cache or ``None`` on configuration errors.
    """
    from tilestore.config.loader import load_configuration

    if not options.config_file:
        parser.print_help()
        print("\nERROR: TileStore configuration required.", file=sys.stderr)
        return None

    if options.debug:
        setup_logging(level=logging.DEBUG)
    else:
        setup_logging(level=logging.WARNING)

    try:
        return load_configuration(options.config_file)
    except ConfigurationError as ex:
        print("ERROR: %s" % ex, file=sys.stderr)
        return None


def create_command(args):
    parser = optparse.OptionParser("usage: %prog create -f tilestore.yaml")
    add_common_options(parser)
    options, args = parser.parse_args(args)

    cache = load_cache(parser, options)
    if cache is None:
        return 2

    try:
        if not cache.initialize():
            print("ERROR: unable to initialize tile table %s" % cache.table_name, file=sys.stderr)
            return 1
        print("tile table %s is ready" % cache.table_name)
        return 0
    finally:
        cache.close()


def put_command(args):
    parser = optparse.OptionParser("usage: %prog put -f tilestore.yaml --type T --zoom Z -x X -y Y tile.png")
    add_common_options(parser)
    add_key_options(parser)
    options, args = parser.parse_args(args)

    if len(args) != 2:
        parser.print_help()
        print("\nERROR: tile file required.", file=sys.stderr)
        return 1
    if not check_key_options(parser, options):
        return 1

    try:
        with open(args[1], 'rb') as f:
            data = f.read()
    except OSError as ex:
        print("ERROR: unable to read tile file: %s" % ex, file=sys.stderr)
        return 1

    cache = load_cache(parser, options)
    if cache is None:
        return 2

    try:
        if not cache.put_image_to_cache(data, options.type, (options.x, options.y), options.zoom):
            print("ERROR: tile not stored", file=sys.stderr)
            return 1
        return 0
    finally:
        cache.close()


def get_command(args):
    parser = optparse.OptionParser("usage: %prog get -f tilestore.yaml --type T --zoom Z -x X -y Y -o tile.png")
    add_common_options(parser)
    add_key_options(parser)
    parser.add_option("-o", "--output", dest="output", default=None,
                      help="Write the tile to this file.")
    options, args = parser.parse_args(args)

    if not options.output:
        parser.print_help()
        print("\nERROR: --output required.", file=sys.stderr)
        return 1
    if not check_key_options(parser, options):
        return 1

    cache = load_cache(parser, options)
    if cache is None:
        return 2

    try:
        tile = cache.get_image_from_cache(options.type, (options.x, options.y), options.zoom)
    finally:
        cache.close()

    if tile is None:
        print("tile not cached", file=sys.stderr)
        return 1

    with open(options.output, 'wb') as f:
        f.write(tile.as_bytes())
    return 0


commands = {
    'create': {
        'func': create_command,
        'help': 'Create the tile table of a configured cache.'
    },
    'put': {
        'func': put_command,
        'help': 'Store a tile file in the cache.'
    },
    'get': {
        'func': get_command,
        'help': 'Write a cached tile to a file.'
    },
}


def print_items(data, title='Commands'):
    name_len = max(len(name) for name in data)

    if title:
        print('%s:' % (title, ), file=sys.stdout)
    for name, item in data.items():
        help = item.get('help', '')
        name = ('%%-%ds' % name_len) % name
        if help:
            help = '  ' + help
        print('  %s%s' % (name, help), file=sys.stdout)


def main():
    args = sys.argv[1:]
    usage = "usage: tilestore-util COMMAND [options]"

    if len(args) < 1 or args[0] in ('--help', '-h'):
        print(usage)
        print()
        print_items(commands)
        sys.exit(1)

    if args[0] == '--version':
        print('TileStore ' + version)
        sys.exit(1)

    command = args[0]
    if command not in commands:
        print(usage)
        print()
        print_items(commands)
        print('\nERROR: unknown command %s' % (command,), file=sys.stdout)
        sys.exit(1)

    args = sys.argv[0:1] + sys.argv[2:]
    sys.exit(commands[command]['func'](args))


if __name__ == '__main__':
    main()
